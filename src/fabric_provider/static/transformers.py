# SPDX-FileCopyrightText: 2025-present Raki Rahman <mdrakiburrahman@gmail.com>
#
# SPDX-License-Identifier: MIT

import re
from typing import Any, TypeVar

import dacite

from fabric_provider.operations.errors import DecodeError

T = TypeVar("T")


class StringTransformer:
    """
    String transformation operations.
    """

    @staticmethod
    def camel_to_snake(name: str) -> str:
        """
        Convert camelCase string to snake_case.
        """

        s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
        return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()

    @staticmethod
    def convert_keys_to_snake_case(obj: Any) -> Any:
        """
        Recursively convert all dictionary keys from camelCase to snake_case.
        """

        if isinstance(obj, dict):
            return {StringTransformer.camel_to_snake(k): StringTransformer.convert_keys_to_snake_case(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [StringTransformer.convert_keys_to_snake_case(item) for item in obj]
        else:
            return obj


class ResponseDecoder:
    """
    Decodes open JSON maps into typed response dataclasses.
    """

    @staticmethod
    def decode(data_class: type[T], data: Any, source: str = "response", cast: list[type] | None = None) -> T:
        """
        Decode a camelCase JSON object into ``data_class``.

        Unknown keys are ignored; missing required fields and wrongly typed
        values fail loudly instead of defaulting.

        Args:
            data_class: Target dataclass
            data: Decoded JSON body
            source: Description of where the data came from, for error messages
            cast: Types dacite may coerce values into

        Raises:
            DecodeError: If the body does not match the dataclass
        """
        if not isinstance(data, dict):
            raise DecodeError(f"Expected a JSON object from {source}, got {type(data).__name__}")
        try:
            return dacite.from_dict(
                data_class=data_class,
                data=StringTransformer.convert_keys_to_snake_case(data),
                config=dacite.Config(cast=cast or []),
            )
        except (dacite.DaciteError, TypeError, ValueError) as e:
            raise DecodeError(f"Failed to decode {data_class.__name__} from {source}: {e}") from e
