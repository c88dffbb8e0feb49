#!/usr/bin/env python3
"""sprintboard CLI entrypoint."""

import sys
import argparse
import logging
from pathlib import Path

from sprintboard.lib.config import ConfigError, load_config
from sprintboard.lib.status import COLUMNS
from sprintboard.commands import board as cmd_board_module
from sprintboard.commands import chat as cmd_chat_module


def get_config(args):
    """Load settings from --config or the environment."""
    config_path = Path(args.config) if args.config else None
    try:
        return load_config(config_path)
    except ConfigError as e:
        print(f"ERROR: {e}")
        sys.exit(2)


def cmd_board(args):
    return cmd_board_module.cmd_board(args, get_config(args))


def cmd_move(args):
    return cmd_board_module.cmd_move(args, get_config(args))


def cmd_chat(args):
    return cmd_chat_module.cmd_chat(args, get_config(args))


def cmd_apply(args):
    return cmd_chat_module.cmd_apply(args, get_config(args))


def cmd_sanitize(args):
    return cmd_chat_module.cmd_sanitize(args)


def main(argv=None):
    parser = argparse.ArgumentParser(prog='sprintboard', description='Project board and AI chat CLI')
    parser.add_argument('--config', '-c', help='Path to a sprintboard.env file')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    # sprintboard board
    p_board = subparsers.add_parser('board', help='Show the project board')
    p_board.add_argument('project', help='Project ID')
    p_board.add_argument('--sprint', '-s', default='all',
                         help="Sprint filter: 'all', 'unassigned' or a sprint ID")
    p_board.set_defaults(func=cmd_board)

    # sprintboard move
    p_move = subparsers.add_parser('move', help='Move a task to another column')
    p_move.add_argument('project', help='Project ID')
    p_move.add_argument('task_id', help='Task ID')
    p_move.add_argument('column', choices=[c.id for c in COLUMNS], help='Target column')
    p_move.set_defaults(func=cmd_move)

    # sprintboard chat
    p_chat = subparsers.add_parser('chat', help='Send a message to the assistant')
    p_chat.add_argument('project', help='Project ID')
    p_chat.add_argument('message', help='Message text')
    p_chat.add_argument('--conversation', help='Conversation ID (default: project-<id>)')
    p_chat.add_argument('--attach', '-a', action='append', metavar='FILE',
                        help='Attach a file (repeatable)')
    p_chat.set_defaults(func=cmd_chat)

    # sprintboard apply
    p_apply = subparsers.add_parser('apply', help='Run directives from a saved assistant reply')
    p_apply.add_argument('project', help='Project ID')
    p_apply.add_argument('file', help='File with the assistant reply')
    p_apply.add_argument('--conversation', help='Conversation ID (default: project-<id>)')
    p_apply.set_defaults(func=cmd_apply)

    # sprintboard sanitize
    p_sanitize = subparsers.add_parser('sanitize', help='Print a reply without directive blocks')
    p_sanitize.add_argument('file', help='File with the assistant reply')
    p_sanitize.set_defaults(func=cmd_sanitize)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
