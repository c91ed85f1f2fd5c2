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

from wxf.exception import WxfError


class SerializationError(WxfError):
    """Base class for errors raised by serializers and deserializers."""


class OutOfDataError(SerializationError, ValueError):
    """Raised when a read would go past the end of the underlying buffer.

    Nothing is consumed when this is raised, the deserializer stays at the position of the failed read.
    """
