import logging
import os
from unittest import TestCase

from mock import patch

from clabedge.common.clabedge_config import (clabedge_arg_parser, handle_environment_variables, initialize_logging,
                                             parse_arg, parse_arguments_and_initialize_logging)


class TestClabEdgeConfig(TestCase):

    def test_arg_parser(self):
        parser = clabedge_arg_parser('test')
        self.assertEqual(parser.parse_args([]).log_level, 'INFO')
        self.assertEqual(parser.parse_args(['-d']).log_level, 'DEBUG')
        self.assertEqual(parser.parse_args(['--log-level', 'ERROR']).log_level, 'ERROR')

    def test_additional_arguments(self):
        def arguments(parser):
            parser.add_argument('--root-fs', dest='root_fs', default='')

        parser = clabedge_arg_parser('test', arguments)
        self.assertEqual(parser.parse_args(['--root-fs', '/host']).root_fs, '/host')

    def test_parse_arg_error(self):
        parser = clabedge_arg_parser('test')
        self.assertIsNone(parse_arg(parser, ['--log-level', 'LOUD']))

    def test_parse_arg_subcommand_error(self):
        def arguments(parser):
            commands = parser.add_subparsers(dest='command', required=True)
            convert = commands.add_parser('convert')
            convert.add_argument('input_type', choices=['current', 'voltage'])
            convert.add_argument('raw', type=int)

        parser = clabedge_arg_parser('test', arguments)
        with patch('argparse.ArgumentParser.print_usage'):
            self.assertIsNone(parse_arg(parser, ['convert', 'current']))
            self.assertIsNone(parse_arg(parser, ['bogus']))
            self.assertIsNone(parse_arg(parser, []))

    def test_parse_arg_help_exits(self):
        parser = clabedge_arg_parser('test')
        with patch('argparse.ArgumentParser.print_help'):
            with self.assertRaises(SystemExit) as ctx:
                parse_arg(parser, ['--help'])
        self.assertEqual(ctx.exception.code, 0)

    @patch.dict(os.environ, {'CLABEDGE_LOG_LEVEL': 'WARNING'})
    def test_handle_environment_variables(self):
        self.assertEqual(handle_environment_variables(['detect']), ['--log-level', 'WARNING', 'detect'])
        self.assertEqual(handle_environment_variables(['-d', 'detect']), ['-d', 'detect'])

    @patch.dict(os.environ, {}, clear=True)
    def test_handle_environment_variables_unset(self):
        self.assertEqual(handle_environment_variables(['detect']), ['detect'])

    @patch('clabedge.common.clabedge_config.initialize_logging')
    def test_parse_arguments_and_initialize_logging(self, mock_init):
        with patch.dict(os.environ, {}, clear=True):
            args = parse_arguments_and_initialize_logging('test', args=['-l', 'WARNING'])
        self.assertEqual(args.log_level, 'WARNING')
        mock_init.assert_called_once_with(log_level='WARNING', config_file='')

    def test_initialize_logging(self):
        root_handlers = list(logging.root.handlers)
        root_level = logging.root.level
        try:
            initialize_logging(log_level='ERROR')
            self.assertEqual(logging.getLogger().level, logging.ERROR)
            self.assertEqual(len(logging.root.handlers), 1)
        finally:
            for handler in list(logging.root.handlers):
                logging.root.removeHandler(handler)
            for handler in root_handlers:
                logging.root.addHandler(handler)
            logging.root.setLevel(root_level)
