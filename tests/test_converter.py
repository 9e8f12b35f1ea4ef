"""
Tests for the AnimatedSVGConverter module.
"""

import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from svg2frames.converter import (
    AnimatedSVGConverter,
    ConfigurationError,
    ConversionError,
    SVGNotFoundError,
    create_default_config,
    load_config,
)
from svg2frames.frame_generator import SVGFrame

FADE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 512 512">'
    '<style>@keyframes fade { from { opacity: 0 } to { opacity: 1 } } '
    '.dot { animation: fade 1s linear infinite }</style>'
    '<circle class="dot" cx="256" cy="256" r="64"/></svg>'
)


class TestAnimatedSVGConverter(unittest.TestCase):
    """Tests for AnimatedSVGConverter class."""

    def setUp(self):
        """Set up test fixtures."""
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.input_path = Path(self.tmp.name) / 'anim.svg'
        self.input_path.write_text(FADE_SVG, encoding='utf-8')
        self.output_dir = Path(self.tmp.name) / 'out'

    def test_convert_writes_frames(self):
        converter = AnimatedSVGConverter({'frames': {'fps': 4}})
        report = converter.convert(str(self.input_path), str(self.output_dir))

        self.assertEqual(report['status'], 'success')
        self.assertEqual(report['frames_count'], 4)
        self.assertEqual(report['total_duration'], 1.0)
        self.assertIsNone(report['sprite_sheet'])

        names = sorted(os.listdir(self.output_dir))
        self.assertEqual(names, ['anim_frame_%04d.svg' % i for i in range(4)])

        second = (self.output_dir / 'anim_frame_0001.svg').read_text(encoding='utf-8')
        self.assertIn('opacity="0.25"', second)
        self.assertNotIn('<style', second)

        self.assertEqual([entry['timestamp'] for entry in report['frames']], [0.0, 0.25, 0.5, 0.75])
        self.assertEqual(report['frames'][1]['size'], os.path.getsize(self.output_dir / 'anim_frame_0001.svg'))

    def test_default_output_dir(self):
        report = AnimatedSVGConverter().convert(str(self.input_path))
        self.assertEqual(report['output_dir'], str(Path(self.tmp.name) / 'frames'))
        self.assertEqual(report['frames_count'], 8)

    def test_progress_callback(self):
        progress = []
        converter = AnimatedSVGConverter({'output': {'sprite_sheet': True}})
        report = converter.convert(str(self.input_path), str(self.output_dir),
                                   progress_callback=lambda pct, msg: progress.append((pct, msg)))

        self.assertEqual([pct for pct, _ in progress], [10, 30, 70, 90, 100])
        self.assertEqual(progress[-1][1], 'Done!')
        self.assertEqual(progress[0][1], 'Reading SVG...')
        self.assertTrue(all(msg.isascii() for _, msg in progress))
        self.assertTrue(Path(report['sprite_sheet']).is_file())
        self.assertEqual(Path(report['sprite_sheet']).name, 'anim_sprite.svg')

    def test_filename_pattern(self):
        converter = AnimatedSVGConverter({
            'frames': {'frame_count': 2},
            'output': {'filename_pattern': '{index}-{name}.svg'},
        })
        converter.convert(str(self.input_path), str(self.output_dir))
        self.assertEqual(sorted(os.listdir(self.output_dir)), ['0-anim.svg', '1-anim.svg'])

    def test_invalid_filename_pattern(self):
        converter = AnimatedSVGConverter({'output': {'filename_pattern': '{bogus}.svg'}})
        with self.assertRaises(ConfigurationError):
            converter.convert(str(self.input_path), str(self.output_dir))

    def test_missing_input(self):
        with self.assertRaises(SVGNotFoundError):
            AnimatedSVGConverter().convert(str(Path(self.tmp.name) / 'missing.svg'))

    def test_os_errors_are_wrapped(self):
        blocker = Path(self.tmp.name) / 'blocker'
        blocker.write_text('x', encoding='utf-8')
        with self.assertRaises(ConversionError):
            AnimatedSVGConverter().convert(str(self.input_path), str(blocker))

    @patch('svg2frames.converter.FrameGenerator')
    def test_generator_configured_from_sections(self, mock_generator_class):
        """Test that the frame generator receives the merged configuration."""
        mock_generator = MagicMock()
        mock_generator.generate_timed.return_value = [
            SVGFrame(data='<svg/>', timestamp=0.0, duration=0.5, index=0, size=6)
        ]
        mock_generator_class.return_value = mock_generator

        converter = AnimatedSVGConverter({
            'frames': {'fps': 12},
            'canvas': {'size': 256},
            'advanced': {'parallel_processing': True},
        })
        report = converter.convert(str(self.input_path), str(self.output_dir))

        mock_generator_class.assert_called_once_with({
            'fps': 12,
            'frame_count': None,
            'canvas_size': 256,
            'parallel_processing': True,
            'num_workers': 4,
        })
        mock_generator.generate_timed.assert_called_once_with(FADE_SVG)
        self.assertEqual(report['frames_count'], 1)
        self.assertEqual(report['total_duration'], 0.5)


class TestConfiguration(unittest.TestCase):
    """Tests for configuration handling."""

    def test_defaults_merged(self):
        converter = AnimatedSVGConverter({'frames': {'fps': 24}})
        self.assertEqual(converter.config['frames'], {'fps': 24, 'frame_count': None})
        self.assertEqual(converter.config['canvas'], create_default_config()['canvas'])

    def test_caller_config_not_mutated(self):
        config = {'frames': {'fps': 24}}
        AnimatedSVGConverter(config)
        self.assertEqual(config, {'frames': {'fps': 24}})

    def test_invalid_values(self):
        invalid = [
            {'frames': {'fps': 0}},
            {'frames': {'fps': 'fast'}},
            {'frames': {'frame_count': 2.5}},
            {'canvas': {'size': -1}},
            {'output': {'sprite_columns': 0}},
            {'advanced': {'num_workers': True}},
            {'frames': 'not a mapping'},
        ]
        for config in invalid:
            with self.assertRaises(ConfigurationError, msg=repr(config)):
                AnimatedSVGConverter(config)

    def test_load_config(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / 'config.yaml'
            path.write_text('frames:\n  fps: 12\noutput:\n  sprite_sheet: true\n', encoding='utf-8')
            self.assertEqual(load_config(str(path)),
                             {'frames': {'fps': 12}, 'output': {'sprite_sheet': True}})

            empty = Path(tmp) / 'empty.yaml'
            empty.write_text('', encoding='utf-8')
            self.assertEqual(load_config(str(empty)), {})

            listing = Path(tmp) / 'list.yaml'
            listing.write_text('- 1\n- 2\n', encoding='utf-8')
            with self.assertRaises(ConfigurationError):
                load_config(str(listing))

            with self.assertRaises(ConfigurationError):
                load_config(str(Path(tmp) / 'missing.yaml'))

    def test_no_config_path(self):
        self.assertEqual(load_config(None), {})


if __name__ == '__main__':
    unittest.main()
