import unittest
from pathlib import Path
from tempfile import TemporaryDirectory

from mock import patch

from clabedge.common.file_operations import (file_exists, file_exists_and_not_empty, read_file,
                                             read_device_tree_string, read_sysfs_value, write_sysfs_value)


class TestFileOperations(unittest.TestCase):

    def setUp(self) -> None:
        self.temp_dir = TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self) -> None:
        self.temp_dir.cleanup()

    def test_file_exists(self):
        self.assertFalse(file_exists(self.root / 'missing'))
        self.assertFalse(file_exists(self.root))

        (self.root / 'present').write_text('x')
        self.assertTrue(file_exists(str(self.root / 'present')))

    def test_file_exists_and_not_empty(self):
        (self.root / 'empty').touch()
        self.assertFalse(file_exists_and_not_empty(self.root / 'empty'))

        (self.root / 'full').write_text('content')
        self.assertTrue(file_exists_and_not_empty(str(self.root / 'full')))

    def test_read_file(self):
        self.assertIsNone(read_file(self.root / 'missing'))

        with self.assertLogs('clabedge.common.file_operations', level='WARNING'):
            self.assertIsNone(read_file(self.root / 'missing', warn_on_missing=True))

        (self.root / 'file').write_text('some text\n')
        self.assertEqual(read_file(str(self.root / 'file')), 'some text\n')

    @patch.object(Path, 'open')
    def test_read_file_error(self, mock_open_path):
        (self.root / 'file').write_text('x')
        mock_open_path.side_effect = PermissionError('denied')
        self.assertIsNone(read_file(self.root / 'file'))

    def test_read_device_tree_string(self):
        (self.root / 'model').write_bytes(b'CompuLab IOT-GATE-iMX8\x00')
        self.assertEqual(read_device_tree_string(self.root / 'model'), 'CompuLab IOT-GATE-iMX8')

        # String lists are NUL separated
        (self.root / 'compatible').write_bytes(b'compulab,iot-gate\x00fsl,imx8mm\x00')
        self.assertEqual(read_device_tree_string(self.root / 'compatible'), 'compulab,iot-gate fsl,imx8mm')

        (self.root / 'empty').write_bytes(b'\x00')
        self.assertIsNone(read_device_tree_string(self.root / 'empty'))
        self.assertIsNone(read_device_tree_string(self.root / 'missing'))

    def test_read_sysfs_value(self):
        (self.root / 'value').write_text(' 1\n')
        self.assertEqual(read_sysfs_value(self.root / 'value'), '1')
        self.assertIsNone(read_sysfs_value(self.root / 'missing'))

    def test_write_sysfs_value(self):
        self.assertTrue(write_sysfs_value(self.root / 'direction', 'out'))
        self.assertEqual((self.root / 'direction').read_text(), 'out')

        self.assertTrue(write_sysfs_value(str(self.root / 'value'), 1))
        self.assertEqual((self.root / 'value').read_text(), '1')

        missing_dir = self.root / 'gpio64' / 'value'
        self.assertFalse(write_sysfs_value(missing_dir, 1, fail_if_error=False))
        with self.assertRaises(OSError):
            write_sysfs_value(missing_dir, 1)
