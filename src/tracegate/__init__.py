# (c) Copyright IBM Corp. 2024

"""
tracegate decides which captured traces are kept and delivers them to a
trace collector agent.

    from tracegate.writer import AgentWriter

    writer = AgentWriter()
    writer.start()
    writer.write(spans)
"""

from tracegate.version import VERSION

__author__ = "tracegate contributors"
__version__ = VERSION
