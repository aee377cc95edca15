# (c) Copyright IBM Corp. 2024

from typing import Any, Dict

import yaml

from tracegate.log import logger


class ConfigReader:
    """
    Reads a YAML configuration file.  Problems with the file are logged and
    leave <data> empty.
    """

    def __init__(self, file_path: str) -> None:
        self.file_path = file_path
        self.data: Dict[str, Any] = {}
        if file_path:
            self.load_file()
        else:
            logger.warning("ConfigReader: No configuration file specified")

    def load_file(self) -> None:
        """Loads and parses the YAML file"""
        try:
            with open(self.file_path, "r") as file:
                data = yaml.safe_load(file)
        except FileNotFoundError:
            logger.error(
                f"ConfigReader: Configuration file has not found: {self.file_path}"
            )
            return
        except yaml.YAMLError as e:
            logger.error(f"ConfigReader: Error parsing YAML file: {e}")
            return

        if data is None:
            return
        if not isinstance(data, dict):
            logger.warning(
                f"ConfigReader: configuration in {self.file_path} is not a mapping, ignoring it"
            )
            return
        self.data = data

    def section(self, name: str) -> Dict[str, Any]:
        """
        Returns the mapping stored under <name>, or an empty dict.
        """
        section = self.data.get(name)
        if section is None:
            return {}
        if not isinstance(section, dict):
            logger.debug(f"ConfigReader: Invalid {name} section type: {type(section)}")
            return {}
        return section
