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
    parser.add_argument('file', help='Path to a file holding one encoded expression, header included')
    parser.add_argument('--tokens', action='store_true', help='Print the flat token stream instead of the tree')
    return parser


def execute(args: Namespace) -> int:
    from wxf.decoder import decode, decode_tokens
    from wxf_cli.util import read_file

    data = read_file(args.file)
    log = logger.new(file=args.file, size=len(data))

    if args.tokens:
        tokens_result = decode_tokens(data)
        for token in tokens_result.unwrap_or([]):
            print(f'{token.offset:>8}  {token!r}')
        error = tokens_result.err()
    else:
        tree_result = decode(data)
        if tree_result.is_ok():
            print(tree_result.unwrap().format())
        error = tree_result.err()

    if error is not None:
        log.error('decode failed', error=str(error))
        return 1
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)
    return execute(args)
