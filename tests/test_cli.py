"""Tests for the CLI."""

from click.testing import CliRunner

from fuel_onboard.cli import main


class TestCaloriesCommand:
    """Tests for the calorie calculator command."""

    def test_reference_case(self):
        """Test the printed breakdown for the reference man."""
        result = CliRunner().invoke(
            main,
            ["calories", "--weight-kg", "70", "--height-cm", "175", "--age", "30",
             "--sex", "male", "--activity", "moderate", "--diff", "-500"],
        )
        assert result.exit_code == 0
        assert "BMR:    1649 kcal/day" in result.output
        assert "Target: 2056 kcal/day (-500 kcal)" in result.output

    def test_hard_floor_warning(self):
        """Test an unsafe diff is reported."""
        result = CliRunner().invoke(
            main,
            ["calories", "--weight-kg", "50", "--height-cm", "155", "--age", "60",
             "--sex", "female", "--diff", "-1000"],
        )
        assert result.exit_code == 0
        assert "Target: 1200 kcal/day" in result.output
        assert "unsafe" in result.output

    def test_version(self):
        """Test the version flag."""
        result = CliRunner().invoke(main, ["--version"])
        assert "fuel-onboard" in result.output
