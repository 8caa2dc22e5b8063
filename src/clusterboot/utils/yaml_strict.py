# Copyright 2026 Kezie Iwueke
# SPDX-License-Identifier: Apache-2.0

# src/clusterboot/utils/yaml_strict.py

from typing import Any, Union

import yaml
from yaml.constructor import ConstructorError

_MERGE_TAG = "tag:yaml.org,2002:merge"


class UniqueKeyLoader(yaml.SafeLoader):
    """
    SafeLoader that rejects a mapping which repeats one of its own keys.
    Keys pulled in through a ``<<`` merge may still be overridden.
    """

    def construct_mapping(self, node, deep=False):
        if isinstance(node, yaml.MappingNode):
            seen = set()
            for key_node, _ in node.value:
                if key_node.tag == _MERGE_TAG:
                    continue
                key = self.construct_object(key_node, deep=deep)
                try:
                    duplicate = key in seen
                except TypeError:
                    # unhashable, SafeLoader reports it below
                    continue
                if duplicate:
                    raise ConstructorError(
                        "while constructing a mapping", node.start_mark,
                        f"found duplicate key {key!r}", key_node.start_mark,
                    )
                seen.add(key)
        return super().construct_mapping(node, deep=deep)


def safe_load_unique(stream: Union[bytes, str]) -> Any:
    """yaml.safe_load, except a repeated mapping key is a yaml.YAMLError."""
    return yaml.load(stream, Loader=UniqueKeyLoader)
