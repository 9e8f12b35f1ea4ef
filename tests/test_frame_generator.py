"""
Tests for the frame_generator module.
"""

import unittest

from svg2frames.css_parser import AnimationBinding, KeyframeStop
from svg2frames.frame_generator import (
    FrameGenerator,
    SVGFrame,
    compute_progress,
    compute_total_duration,
    generate_frames,
    resolve_frame_count,
    resolve_keyframe_properties,
)

FADE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg">'
    '<style>@keyframes fade { from { opacity: 0 } to { opacity: 1 } } '
    '.dot { animation: fade 1s linear infinite }</style>'
    '<circle class="dot" r="5"/></svg>'
)

GROW_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg">'
    '<style>@keyframes grow { from { transform: scale(1) } to { transform: scale(2) } } '
    '.s { animation: grow 1s linear; transform-origin: center }</style>'
    '<rect class="s" width="10" height="10"/></svg>'
)


def binding(**kwargs):
    values = {'selector_group': '.a', 'name': 'anim', 'duration': 1.0}
    values.update(kwargs)
    return AnimationBinding(**values)


class TestComputeProgress(unittest.TestCase):
    """Tests for compute_progress()."""

    def test_normal(self):
        self.assertEqual(compute_progress(binding(), 0.25), 0.25)
        self.assertEqual(compute_progress(binding(duration=2.0), 3.0), 0.5)

    def test_delay(self):
        self.assertEqual(compute_progress(binding(delay=0.5), 0.25), 0.0)
        self.assertEqual(compute_progress(binding(delay=0.5), 0.75), 0.25)

    def test_reverse(self):
        self.assertEqual(compute_progress(binding(direction='reverse'), 0.25), 0.75)

    def test_alternate_matches_reverse_on_odd_cycles(self):
        alternate = compute_progress(binding(direction='alternate'), 1.25)
        reverse = compute_progress(binding(direction='reverse'), 0.25)
        self.assertEqual(alternate, 0.75)
        self.assertEqual(alternate, reverse)
        self.assertEqual(compute_progress(binding(direction='alternate'), 0.25), 0.25)

    def test_alternate_reverse(self):
        self.assertEqual(compute_progress(binding(direction='alternate-reverse'), 0.25), 0.75)
        self.assertEqual(compute_progress(binding(direction='alternate-reverse'), 1.25), 0.25)

    def test_zero_duration(self):
        self.assertEqual(compute_progress(binding(duration=0.0), 5.0), 0.0)
        self.assertEqual(compute_progress(binding(duration=0.0, direction='reverse'), 5.0), 1.0)


class TestResolveKeyframeProperties(unittest.TestCase):
    """Tests for resolve_keyframe_properties()."""

    def test_interpolates_shared_and_passes_one_sided(self):
        stops = (
            KeyframeStop(0.0, {'opacity': '0', 'fill': 'red'}),
            KeyframeStop(1.0, {'opacity': '1', 'stroke': 'blue'}),
        )
        resolved = resolve_keyframe_properties(stops, 0.5, 'linear')
        self.assertEqual(resolved, {'opacity': '0.5', 'fill': 'red', 'stroke': 'blue'})
        self.assertEqual(list(resolved), ['opacity', 'fill', 'stroke'])

    def test_single_stop(self):
        stops = (KeyframeStop(0.5, {'opacity': '0.3'}),)
        self.assertEqual(resolve_keyframe_properties(stops, 0.9, 'linear'), {'opacity': '0.3'})

    def test_clamped_outside_stops(self):
        stops = (KeyframeStop(0.2, {'x': '0'}), KeyframeStop(0.8, {'x': '10'}))
        self.assertEqual(resolve_keyframe_properties(stops, 0.1, 'linear'), {'x': '0'})
        self.assertEqual(resolve_keyframe_properties(stops, 0.9, 'linear'), {'x': '10'})

    def test_brackets_inner_segment(self):
        stops = (
            KeyframeStop(0.0, {'x': '0'}),
            KeyframeStop(0.5, {'x': '10'}),
            KeyframeStop(1.0, {'x': '0'}),
        )
        self.assertEqual(resolve_keyframe_properties(stops, 0.75, 'linear'), {'x': '5'})
        self.assertEqual(resolve_keyframe_properties(stops, 0.25, 'linear'), {'x': '5'})

    def test_no_stops(self):
        self.assertEqual(resolve_keyframe_properties((), 0.5), {})


class TestTimeline(unittest.TestCase):
    """Tests for duration and frame count resolution."""

    def test_total_duration(self):
        animations = {'.a': binding(duration=2.0), '.b': binding(duration=0.5)}
        self.assertEqual(compute_total_duration(animations), 2.0)
        self.assertEqual(compute_total_duration({'.a': binding(duration=0.0)}), 1.0)
        self.assertEqual(compute_total_duration({}), 1.0)

    def test_frame_count(self):
        self.assertEqual(resolve_frame_count(1.0), 8)
        self.assertEqual(resolve_frame_count(1.5, fps=3), 5)
        self.assertEqual(resolve_frame_count(0.1, fps=1), 1)
        self.assertEqual(resolve_frame_count(10.0, fps=8, frame_count=3), 3)


class TestFrameGenerator(unittest.TestCase):
    """Tests for FrameGenerator."""

    def test_fade_frames(self):
        frames = generate_frames(FADE_SVG, fps=4)
        self.assertEqual(len(frames), 4)
        self.assertEqual(
            frames[1],
            '<svg xmlns="http://www.w3.org/2000/svg"><circle class="dot" r="5" opacity="0.25"/></svg>'
        )
        opacities = [frame.split('opacity="')[1].split('"')[0] for frame in frames]
        self.assertEqual(opacities, ['0', '0.25', '0.5', '0.75'])

    def test_cdata_wrapped_style(self):
        svg = ('<svg xmlns="http://www.w3.org/2000/svg"><style><![CDATA[ '
               '.dot { animation: fade 1s linear infinite } '
               '@keyframes fade {from{opacity:0} to{opacity:1}} ]]></style>'
               '<circle class="dot" r="5"/></svg>')
        frames = generate_frames(svg, fps=4)
        self.assertEqual(
            frames[1],
            '<svg xmlns="http://www.w3.org/2000/svg"><circle class="dot" r="5" opacity="0.25"/></svg>'
        )

    def test_style_removed_from_every_frame(self):
        for frame in generate_frames(FADE_SVG):
            self.assertNotIn('<style', frame)
            self.assertNotIn('@keyframes', frame)

    def test_default_frame_count(self):
        self.assertEqual(len(generate_frames(FADE_SVG)), 8)
        self.assertEqual(len(generate_frames(FADE_SVG, frame_count=3)), 3)

    def test_without_style_returns_input(self):
        svg = '<svg><rect/></svg>'
        self.assertEqual(generate_frames(svg), [svg])

    def test_without_animation_returns_input(self):
        svg = '<svg><style>rect { fill: red }</style><rect/></svg>'
        self.assertEqual(generate_frames(svg), [svg])

    def test_missing_keyframes_leaves_elements_alone(self):
        svg = ('<svg><style>@keyframes a { to { opacity: 1 } } .x { animation: b 1s }</style>'
               '<rect class="x"/></svg>')
        self.assertEqual(generate_frames(svg, frame_count=2), ['<svg><rect class="x"/></svg>'] * 2)

    def test_selector_group_applies_to_each_selector(self):
        svg = ('<svg><style>@keyframes fade { from { opacity: 0 } to { opacity: 1 } } '
               '#a, .b { animation: fade 1s linear }</style>'
               '<rect id="a"/><circle class="b"/></svg>')
        frames = generate_frames(svg, frame_count=2)
        self.assertEqual(frames[1], '<svg><rect id="a" opacity="0.5"/><circle class="b" opacity="0.5"/></svg>')

    def test_transform_origin_baked(self):
        frames = generate_frames(GROW_SVG, frame_count=2)
        self.assertIn('transform="translate(256,256) scale(1) translate(-256,-256)"', frames[0])
        self.assertIn('transform="translate(256,256) scale(1.5) translate(-256,-256)"', frames[1])
        self.assertNotIn('transform-origin', frames[1])

    def test_canvas_size(self):
        frames = generate_frames(GROW_SVG, frame_count=2, canvas_size=100)
        self.assertIn('transform="translate(50,50) scale(1.5) translate(-50,-50)"', frames[1])

    def test_generation_is_repeatable(self):
        generator = FrameGenerator({'fps': 4})
        self.assertEqual(generator.generate(FADE_SVG), generator.generate(FADE_SVG))

    def test_compiled_frame_is_a_fixed_point(self):
        frame = generate_frames(FADE_SVG, fps=4)[2]
        self.assertEqual(generate_frames(frame), [frame])

    def test_parallel_matches_serial(self):
        serial = FrameGenerator({'fps': 8}).generate(FADE_SVG)
        parallel = FrameGenerator({'fps': 8, 'parallel_processing': True, 'num_workers': 3}).generate(FADE_SVG)
        self.assertEqual(parallel, serial)

    def test_timed_frames(self):
        frames = FrameGenerator({'fps': 4}).generate_timed(FADE_SVG)
        self.assertTrue(all(isinstance(frame, SVGFrame) for frame in frames))
        self.assertEqual([frame.timestamp for frame in frames], [0.0, 0.25, 0.5, 0.75])
        self.assertEqual([frame.index for frame in frames], [0, 1, 2, 3])
        self.assertTrue(all(frame.duration == 0.25 for frame in frames))
        self.assertEqual(frames[2].size, len(frames[2].data.encode('utf-8')))


if __name__ == '__main__':
    unittest.main()
