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

import sys
from argparse import ArgumentParser, Namespace
from typing import Optional

from structlog import get_logger

logger = get_logger()


def create_parser() -> ArgumentParser:
    from wxf_cli.util import create_parser

    parser = create_parser()
    parser.add_argument('template', help='Template to compile, for instance \'f[1, "a", #x]\'')
    parser.add_argument('--arg', action='append', default=[], metavar='NAME=TEMPLATE',
                        help='Value of a placeholder, itself a template (can be repeated)')
    parser.add_argument('--output', required=True, help='File the encoded expression is written to')
    return parser


def parse_assignment(assignment: str) -> tuple[str, str]:
    name, sep, template = assignment.partition('=')
    if not sep or not name:
        raise ValueError(f'invalid --arg {assignment!r}, expected NAME=TEMPLATE')
    return name, template


def execute(args: Namespace) -> int:
    from wxf.exception import TemplateError
    from wxf.template import compile_template

    log = logger.new(output=args.output)
    try:
        mapping: dict[str, bytes] = {}
        for assignment in args.arg:
            name, template = parse_assignment(assignment)
            mapping[name] = compile_template(template, include_header=False)
        data = compile_template(args.template, mapping)
    except (TemplateError, ValueError) as e:
        log.error('compile failed', error=str(e))
        return 1

    with open(args.output, 'wb') as fp:
        fp.write(data)
    log.info('expression written', size=len(data))
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    return execute(args)
