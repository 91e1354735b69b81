"""
Unit tests for CommandController.

Checks the console messages for every command, file I/O through LOAD and
SAVE, and EXIT handling.
"""

from unittest.mock import patch

import pytest

from pnm_editor.controllers.command_controller import CommandController, CommandResult


@pytest.fixture
def controller(session) -> CommandController:
    return CommandController(session=session)


@pytest.fixture
def gray_file(tmp_path, codec, gradient_gray):
    path = tmp_path / "gradient.pgm"
    path.write_bytes(codec.encode(gradient_gray))
    return path


@pytest.fixture
def color_file(tmp_path, p3_3x3):
    path = tmp_path / "color.ppm"
    path.write_bytes(p3_3x3)
    return path


@pytest.fixture
def loaded(controller, gray_file) -> CommandController:
    controller.execute(f"LOAD {gray_file}")
    return controller


@pytest.fixture
def loaded_color(controller, color_file) -> CommandController:
    controller.execute(f"LOAD {color_file}")
    return controller


def lines(controller: CommandController, line: str):
    return controller.execute(line).lines


class TestDispatch:
    """Test tokenization and command lookup."""

    def test_blank_line_is_ignored(self, controller):
        assert controller.execute("   \t ") == CommandResult()

    @pytest.mark.parametrize("line", ["FOO", "load x.pgm", "Select ALL", "ROTATE90"])
    def test_unknown_command(self, controller, line):
        assert lines(controller, line) == ["Invalid command"]

    @pytest.mark.parametrize("line", ["SELECT ALL", "CROP", "ROTATE 90", "APPLY BLUR", "EQUALIZE", "HISTOGRAM 5 4", "SAVE out.pgm"])
    def test_commands_need_image(self, controller, line):
        assert lines(controller, line) == ["No image loaded"]

    def test_no_image_reported_before_bad_arguments(self, controller):
        assert lines(controller, "ROTATE abc") == ["No image loaded"]

    def test_extra_whitespace_between_tokens(self, loaded):
        assert lines(loaded, "  SELECT   1  2\t3 4 ") == ["Selected 1 2 3 4"]


class TestLoad:
    """Test LOAD."""

    def test_load(self, controller, gray_file):
        assert lines(controller, f"LOAD {gray_file}") == [f"Loaded {gray_file}"]
        assert controller.session.has_image()

    def test_missing_file(self, controller, tmp_path):
        missing = tmp_path / "missing.pgm"

        assert lines(controller, f"LOAD {missing}") == [f"Failed to load {missing}"]

    def test_failed_load_drops_current_image(self, loaded, tmp_path):
        broken = tmp_path / "broken.pgm"
        broken.write_bytes(b"P2\n2 2\n255\n1 2\n")

        assert lines(loaded, f"LOAD {broken}") == [f"Failed to load {broken}"]
        assert not loaded.session.has_image()
        assert lines(loaded, "CROP") == ["No image loaded"]

    def test_load_file_path_with_space(self, controller, tmp_path, p2_2x2):
        folder = tmp_path / "My Pictures"
        folder.mkdir()
        path = folder / "a.pgm"
        path.write_bytes(p2_2x2)

        assert controller.load_file(str(path)).lines == [f"Loaded {path}"]
        assert controller.session.buffer.width == 2

    def test_load_file_missing(self, loaded, tmp_path):
        missing = tmp_path / "no such" / "a.pgm"

        assert loaded.load_file(str(missing)).lines == [f"Failed to load {missing}"]
        assert not loaded.session.has_image()

    def test_console_path_with_space_is_two_tokens(self, controller, tmp_path):
        assert lines(controller, f"LOAD {tmp_path}/My Pictures/a.pgm") == ["Invalid command"]

    @pytest.mark.parametrize("line", ["LOAD", "LOAD a.pgm b.pgm"])
    def test_wrong_arity(self, controller, line):
        assert lines(controller, line) == ["Invalid command"]


class TestSelect:
    """Test SELECT."""

    def test_select_all(self, loaded):
        assert lines(loaded, "SELECT ALL") == ["Selected ALL"]

    def test_select_prints_normalized(self, loaded):
        assert lines(loaded, "SELECT 8 6 2 1") == ["Selected 2 1 8 6"]

    @pytest.mark.parametrize("line", ["SELECT 5 5 5 5", "SELECT 0 0 11 4", "SELECT -1 0 2 2"])
    def test_invalid_coordinates(self, loaded, line):
        assert lines(loaded, line) == ["Invalid set of coordinates"]

    @pytest.mark.parametrize("line", ["SELECT", "SELECT 1 2 3", "SELECT 1 2 3 x", "SELECT 1.5 2 3 4", "SELECT all"])
    def test_malformed(self, loaded, line):
        assert lines(loaded, line) == ["Invalid command"]


class TestRotate:
    """Test ROTATE."""

    @pytest.mark.parametrize("angle", ["90", "-90", "180", "-270", "360", "0"])
    def test_supported_angles(self, loaded, angle):
        assert lines(loaded, f"ROTATE {angle}") == [f"Rotated {angle}"]

    @pytest.mark.parametrize("angle", ["45", "450", "-100"])
    def test_unsupported_angle(self, loaded, angle):
        assert lines(loaded, f"ROTATE {angle}") == ["Unsupported rotation angle"]

    def test_selection_not_square(self, loaded):
        loaded.execute("SELECT 0 0 4 2")

        assert lines(loaded, "ROTATE 90") == ["The selection must be square"]

    @pytest.mark.parametrize("line", ["ROTATE", "ROTATE ninety", "ROTATE 90 90"])
    def test_malformed(self, loaded, line):
        assert lines(loaded, line) == ["Invalid command"]


class TestCropApplyEqualize:
    """Test CROP, APPLY and EQUALIZE."""

    def test_crop(self, loaded):
        loaded.execute("SELECT 0 0 3 2")

        assert lines(loaded, "CROP") == ["Image cropped"]
        assert (loaded.session.buffer.width, loaded.session.buffer.height) == (3, 2)

    @pytest.mark.parametrize("name", ["EDGE", "SHARPEN", "BLUR", "GAUSSIAN_BLUR"])
    def test_apply(self, loaded_color, name):
        assert lines(loaded_color, f"APPLY {name}") == [f"APPLY {name} done"]

    def test_apply_on_grayscale(self, loaded):
        assert lines(loaded, "APPLY BLUR") == ["Easy, Charlie Chaplin"]

    def test_apply_unknown_filter(self, loaded_color):
        assert lines(loaded_color, "APPLY blur") == ["APPLY parameter invalid"]

    def test_apply_colour_checked_before_name(self, loaded):
        assert lines(loaded, "APPLY NOPE") == ["Easy, Charlie Chaplin"]

    def test_equalize(self, loaded):
        assert lines(loaded, "EQUALIZE") == ["Equalize done"]

    def test_equalize_color(self, loaded_color):
        assert lines(loaded_color, "EQUALIZE") == ["Black and white image needed"]

    @pytest.mark.parametrize("line", ["CROP now", "EQUALIZE 1", "APPLY", "APPLY BLUR EDGE"])
    def test_malformed(self, loaded_color, line):
        assert lines(loaded_color, line) == ["Invalid command"]


class TestHistogram:
    """Test HISTOGRAM."""

    def test_histogram_output(self, loaded):
        out = lines(loaded, "HISTOGRAM 4 2")

        # gradient values 0..99 all fall into the lower half
        assert out == ["4\t|\t****", "0\t|\t"]

    def test_star_count_too_large_to_render(self, loaded):
        assert lines(loaded, "HISTOGRAM 100000000000000000000 2") == ["Not enough memory"]
        assert lines(loaded, "HISTOGRAM 4 2") == ["4\t|\t****", "0\t|\t"]

    def test_render_memory_error(self, loaded):
        with patch.object(loaded.session, "_render_histogram", side_effect=MemoryError):
            assert lines(loaded, "HISTOGRAM 4 2") == ["Not enough memory"]
        assert loaded.session.has_image()

    def test_histogram_color(self, loaded_color):
        assert lines(loaded_color, "HISTOGRAM 4 2") == ["Black and white image needed"]

    @pytest.mark.parametrize("line", ["HISTOGRAM 4", "HISTOGRAM 4 3", "HISTOGRAM -4 2", "HISTOGRAM 4 512", "HISTOGRAM a b"])
    def test_bad_arguments(self, loaded, line):
        assert lines(loaded, line) == ["Invalid command"]


class TestSave:
    """Test SAVE."""

    def test_save_binary(self, loaded, tmp_path, codec, gradient_gray):
        target = tmp_path / "out.pgm"

        assert lines(loaded, f"SAVE {target}") == [f"Saved {target}"]
        assert target.read_bytes() == codec.encode(gradient_gray)

    def test_save_ascii(self, loaded_color, tmp_path):
        target = tmp_path / "out.ppm"

        assert lines(loaded_color, f"SAVE {target} ascii") == [f"Saved {target}"]
        assert target.read_bytes().startswith(b"P3\n3 3\n255\n0 1 200 ")

    def test_save_to_missing_directory(self, loaded, tmp_path):
        target = tmp_path / "nope" / "out.pgm"

        assert lines(loaded, f"SAVE {target}") == [f"Failed to save {target}"]

    def test_save_file_path_with_space(self, loaded_color, tmp_path):
        folder = tmp_path / "My Pictures"
        folder.mkdir()
        target = folder / "out file.ppm"

        assert loaded_color.save_file(str(target), ascii=True).lines == [f"Saved {target}"]
        assert target.read_bytes().startswith(b"P3\n3 3\n255\n")

    def test_save_file_without_image(self, controller, tmp_path):
        target = tmp_path / "out.pgm"

        assert controller.save_file(str(target)).lines == ["No image loaded"]
        assert not target.exists()

    @pytest.mark.parametrize("line", ["SAVE", "SAVE a.pgm binary", "SAVE a.pgm ascii extra"])
    def test_malformed(self, loaded, line):
        assert lines(loaded, line) == ["Invalid command"]


class TestExit:
    """Test EXIT."""

    def test_exit_with_image(self, loaded):
        result = loaded.execute("EXIT")

        assert result.exit
        assert result.lines == []

    def test_exit_without_image_keeps_running(self, controller):
        result = controller.execute("EXIT")

        assert not result.exit
        assert result.lines == ["No image loaded"]

    def test_exit_with_arguments(self, loaded):
        assert loaded.execute("EXIT now") == CommandResult(lines=["Invalid command"])


class TestAllocationFailure:
    def test_not_enough_memory(self, loaded):
        with patch.object(loaded.session._processor, "crop", side_effect=MemoryError):
            assert lines(loaded, "CROP") == ["Not enough memory"]
        assert lines(loaded, "CROP") == ["Image cropped"]
