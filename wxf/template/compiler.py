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

from typing import Callable, Mapping, Optional, Union

from structlog import get_logger

from wxf.convert import encode_value
from wxf.encoder import Encoder
from wxf.exception import MissingPlaceholder, TemplateSyntaxError
from wxf.serialization.types import Buffer
from wxf.template.parser import Call, Literal, Node, Placeholder, parse_template

logger = get_logger()

# a headerless encoded fragment, or a callback that pushes exactly one expression on the given encoder
PlaceholderValue = Union[Buffer, Callable[[Encoder], object]]

_RULE_HEADS = ('Rule', 'RuleDelayed')


class Template:
    """A parsed template, ready to be compiled any number of times with different placeholder values.

    >>> Template('f[#x, {1, "a"}]').compile({'x': b'C\\x07'}, include_header=True).hex(' ')
    '38 3a 66 02 73 01 66 43 07 66 02 73 04 4c 69 73 74 43 01 53 01 61'
    """

    def __init__(self, source: str) -> None:
        self.log = logger.new()
        self.source = source
        self.root = parse_template(source)

    def compile(self, mapping: Optional[Mapping[str, PlaceholderValue]] = None, *,
                include_header: Optional[bool] = None) -> bytes:
        encoder = Encoder(include_header=include_header)
        self._emit(encoder, self.root, mapping or {})
        self.log.debug('template compiled', size=len(encoder))
        return encoder.getvalue()

    def _emit(self, encoder: Encoder, node: Node, mapping: Mapping[str, PlaceholderValue]) -> None:
        match node:
            case Literal(value=value):
                encode_value(encoder, value)
            case Placeholder(name=name):
                if name not in mapping:
                    raise MissingPlaceholder(name)
                value = mapping[name]
                if callable(value):
                    value(encoder)
                else:
                    encoder.push_raw(value)
            case Call(head=head, args=args, position=position) if head in _RULE_HEADS:
                if len(args) != 2:
                    raise TemplateSyntaxError(f'{head} takes 2 arguments, {len(args)} given', position=position)
                if head == 'Rule':
                    encoder.push_rule()
                else:
                    encoder.push_delay_rule()
                for arg in args:
                    self._emit(encoder, arg, mapping)
            case Call(head=head, args=args):
                encoder.push_function(head, len(args))
                for arg in args:
                    self._emit(encoder, arg, mapping)


def compile_template(template: str, mapping: Optional[Mapping[str, PlaceholderValue]] = None, *,
                     include_header: Optional[bool] = None) -> bytes:
    """Parse and compile a template in one go, see `Template`."""
    return Template(template).compile(mapping, include_header=include_header)
