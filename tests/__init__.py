# (c) Copyright IBM Corp. 2024
