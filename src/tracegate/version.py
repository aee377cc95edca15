# (c) Copyright IBM Corp. 2024

# Module version file.  Used by setup.py and snapshot reporting.

VERSION = "0.4.0"
