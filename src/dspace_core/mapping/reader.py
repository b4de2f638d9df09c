# src/dspace_core/mapping/reader.py
import logging
import re
import string
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import cerberus
import yaml

from .exceptions import MappingParsingError, MappingSchemaError
from .raw_data import CodeMapping

logger = logging.getLogger(__name__)

ID_REGEX_FRAGMENT = r"[a-zA-Z_][a-zA-Z0-9_]*"

# Parameter ids and class names are both dot-separated chains of identifiers,
# e.g. 'Mutation.Rate' or 'mypkg.operators.GaussianMutation'.
DOTTED_ID_REGEX = f"^{ID_REGEX_FRAGMENT}(\\.{ID_REGEX_FRAGMENT})*$"
ALLOWED_ID_CHARS = set(string.ascii_letters + string.digits + "_.")


class MappingValidator(cerberus.Validator):
    """Cerberus validator with the identifier and uniqueness rules of mapping files."""
    def __init__(self, *args, **kwargs):
        super(MappingValidator, self).__init__(*args, **kwargs)
        self.rules['dotted_id'] = {'schema': {'type': 'boolean'}}
        self.rules['identifier_list'] = {'schema': {'type': 'boolean'}}
        self.rules['unique_elements_by_key'] = {'schema': {'type': 'string'}}

    def _validate_dotted_id(self, constraint: bool, field: str, value: Any):
        """
        The rule's arguments are validated against this schema:
        {'type': 'boolean'}
        """
        if not constraint or not isinstance(value, str):
            return
        if not re.match(DOTTED_ID_REGEX, value):
            invalid_chars = sorted(set(value) - ALLOWED_ID_CHARS)
            message = (
                f"Identifier '{value}' is invalid. It must be a dot-separated chain of identifiers "
                f"(letters, digits and underscores, not starting with a digit)."
            )
            if invalid_chars:
                message += f" Forbidden character(s): {invalid_chars}"
            self._error(field, message)

    def _validate_identifier_list(self, constraint: bool, field: str, value: Any):
        """
        The rule's arguments are validated against this schema:
        {'type': 'boolean'}
        """
        if not constraint or not isinstance(value, str):
            return
        bad_tokens = [token for token in value.split() if not re.match(DOTTED_ID_REGEX, token)]
        if bad_tokens:
            self._error(field, f"Constructor identifiers {bad_tokens} are not valid identifiers.")

    def _validate_unique_elements_by_key(self, key_for_uniqueness: str, field: str, value: List[Dict]):
        """
        Validates that all dictionaries in a list have a unique value for a given key.
        The rule's arguments are validated against this schema:
        {'type': 'string'}
        """
        if not isinstance(value, list):
            return

        seen_keys = set()
        duplicates = set()
        for item in value:
            if not isinstance(item, dict):
                continue
            item_key = item.get(key_for_uniqueness)
            if item_key is None:
                continue
            if item_key in seen_keys:
                duplicates.add(item_key)
            seen_keys.add(item_key)

        if duplicates:
            self._error(field, f"Duplicate values found for key '{key_for_uniqueness}': {sorted(duplicates)}")


class CodeMappingReader:
    """
    Reads and validates a code-mapping YAML file into `CodeMapping` records.

    The expected document is::

        mappings:
          - id: Mutation.Strategy
            type: mypkg.operators.GaussianMutation
            constructor: "Rate Size"
    """
    _dotted_id_rule = {"type": "string", "required": True, "empty": False, "dotted_id": True}

    _schema = {
        "mappings": {
            "type": "list",
            "required": True,
            "unique_elements_by_key": "id",
            "schema": {
                "type": "dict",
                "schema": {
                    "id": _dotted_id_rule,
                    "type": _dotted_id_rule,
                    "constructor": {"type": "string", "required": False, "nullable": True, "identifier_list": True},
                },
            },
        },
    }

    def __init__(self):
        self._validator = MappingValidator(self._schema)
        self._validator.allow_unknown = False
        logger.debug("CodeMappingReader initialized.")

    def read(self, mapping_file: Union[str, Path]) -> List[CodeMapping]:
        """Parses the mapping file at `mapping_file`."""
        path = Path(mapping_file).resolve()
        logger.info(f"Reading code mappings from: {path}")
        return self.read_document(self._load_yaml(path), source_path=path)

    def read_document(self, document: Any, source_path: Optional[Path] = None) -> List[CodeMapping]:
        """Validates an already-loaded mapping document."""
        if not isinstance(document, dict):
            raise MappingParsingError(details="The root of a mapping document must be a dictionary (mapping).", file_path=source_path)
        if not self._validator.validate(document):
            raise MappingSchemaError(self._validator.errors, source_path)

        validated = self._validator.document
        mappings = [
            CodeMapping(
                param_id=entry["id"],
                class_name=entry["type"],
                constructor_signature=entry.get("constructor"),
                source_path=source_path,
            )
            for entry in validated["mappings"]
        ]
        logger.info(f"Loaded {len(mappings)} code mapping(s).")
        return mappings

    def _load_yaml(self, source: Path) -> Any:
        if not source.is_file():
            raise MappingParsingError(details=f"Mapping file not found at path: {source}", file_path=source)
        try:
            with source.open("r", encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except PermissionError as e:
            raise MappingParsingError(details=f"Permission denied when trying to read file: {e}", file_path=source) from e
        except yaml.YAMLError as e:
            raise MappingParsingError(details=f"Invalid YAML syntax: {e}", file_path=source) from e
        if content is None:
            raise MappingParsingError(details="The YAML file is empty or contains no valid content.", file_path=source)
        return content
