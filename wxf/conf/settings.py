#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

from pathlib import Path
from typing import Optional, Union

from pydantic import Field

from wxf.utils import pydantic


class CodecSettings(pydantic.BaseModel):
    # Largest buffer `decode` accepts, longer inputs are rejected before any token is read. `None` disables the check.
    MAX_INPUT_BYTES: Optional[int] = Field(default=None, ge=2)

    # Deepest nesting of open composites (functions, associations, rules) accepted while building a tree. The root
    # counts as depth 1. `None` disables the check.
    MAX_DEPTH: Optional[int] = Field(default=None, ge=1)

    # Whether a new `Encoder` starts by writing the 2-byte format header.
    INCLUDE_HEADER: bool = True

    @classmethod
    def from_yaml(cls, *, filepath: Union[Path, str]) -> 'CodecSettings':
        """Takes a filepath to a yaml file and returns a validated CodecSettings instance."""
        from wxf.utils.yaml import model_from_yaml
        return model_from_yaml(cls, filepath=filepath)
