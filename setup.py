# coding: utf-8
# (c) Copyright IBM Corp. 2024

from os import path

from setuptools import find_packages, setup

# Import README.md into long_description
pwd = path.abspath(path.dirname(__file__))

with open(path.join(pwd, 'README.md'), encoding='utf-8') as f:
    long_description = f.read()

about = {}
with open(path.join(pwd, 'src', 'tracegate', 'version.py'), encoding='utf-8') as f:
    exec(f.read(), about)


setup(name='tracegate',
      version=about['VERSION'],
      license='MIT',
      description='Client side trace sampling and collector transport for distributed tracing agents',
      package_dir={'': 'src'},
      packages=find_packages(where='src'),
      long_description=long_description,
      long_description_content_type='text/markdown',
      zip_safe=False,
      python_requires='>=3.8',
      install_requires=['PyYAML>=6.0.1',
                        'requests>=2.6.0'],
      extras_require={
          'test': ['pytest>=7.0.0'],
      },
      keywords=['tracing', 'distributed-tracing', 'sampling', 'apm'],
      classifiers=[
          'Development Status :: 4 - Beta',
          'Intended Audience :: Developers',
          'License :: OSI Approved :: MIT License',
          'Operating System :: OS Independent',
          'Programming Language :: Python',
          'Programming Language :: Python :: 3',
          'Topic :: System :: Monitoring',
          'Topic :: System :: Networking :: Monitoring',
          'Topic :: Software Development :: Libraries :: Python Modules'])
