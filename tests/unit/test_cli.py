"""
Tests for the heliumctl command-line interface
"""

from unittest.mock import patch

import pytest

from helium.cli import (
    HeliumCLI,
    convert_like,
    create_parser,
    main,
    parse_anchor,
    parse_assignments,
    parse_value,
)
from helium.config.gateway import DEFAULT_PREFERENCES_PATH, MemoryGateway, YamlFileGateway
from helium.config.settings import AppSettings
from helium.managers.widget_set import WIDGET_PROPERTIES_KEY, WidgetSetStore
from helium.utils.errors import ConfigurationError
from helium.widgets.base import WidgetModule
from helium.widgets.weather import Location


@pytest.fixture
def cli(populated_gateway):
    """CLI over the sample widget sets"""
    return HeliumCLI(gateway=populated_gateway)


def reload_sets(gateway):
    return WidgetSetStore(gateway).widget_sets


class TestValueParsing:
    """Test key=value argument handling"""

    def test_parse_assignments(self):
        assert parse_assignments(["a=1", "b=", "c=x=y"]) == {"a": "1", "b": "", "c": "x=y"}

    @pytest.mark.parametrize("pair", ["novalue", "=1"])
    def test_parse_assignments_invalid(self, pair):
        with pytest.raises(ConfigurationError):
            parse_assignments([pair])

    def test_parse_value_types(self):
        """Non-string options get YAML scalar types"""
        assert parse_value("true") is True
        assert parse_value("12") == 12
        assert parse_value("1.5") == 1.5
        assert parse_value("") is None

    def test_parse_value_string_default(self):
        """String options keep the raw text"""
        assert parse_value("true", "") == "true"
        assert parse_value("HH:mm", "hh:mm") == "HH:mm"
        assert parse_value("", "x") == ""

    def test_convert_like(self):
        assert convert_like("scale", "80", 100.0) == 80.0
        assert convert_like("anchor", "2", 0) == 2
        assert convert_like("text_bold", "yes", False) is True
        with pytest.raises(ConfigurationError):
            convert_like("anchor", "1.5", 0)
        with pytest.raises(ConfigurationError):
            convert_like("text_bold", "3", False)
        with pytest.raises(ConfigurationError):
            convert_like("scale", "true", 100.0)

    def test_parse_anchor(self):
        assert parse_anchor("center") == 1
        assert parse_anchor("RIGHT") == 2
        assert parse_anchor("0") == 0


class TestSetCommands:
    """Test widget-set commands"""

    def test_list(self, cli, capsys):
        assert cli.list_sets() == 0
        out = capsys.readouterr().out
        assert "[0] Main (2 widget(s), anchor left)" in out
        assert "[1] Battery (2 widget(s), anchor right)" in out

    def test_list_empty(self, capsys):
        assert HeliumCLI(gateway=MemoryGateway()).list_sets() == 0
        assert "No widget sets defined." in capsys.readouterr().out

    def test_show(self, cli, capsys):
        assert cli.show_set(0) == 0
        out = capsys.readouterr().out
        assert "title: Main" in out
        assert "color: '#ffffffff'" in out
        assert "[0] Network: ↑ 30 KB/s" in out
        assert "[1] Time:" in out

    def test_show_invalid_position(self, cli):
        with pytest.raises(ConfigurationError):
            cli.show_set(5)

    def test_create(self, cli, populated_gateway):
        assert cli.create_set("New", anchor=1) == 0
        created = reload_sets(populated_gateway)[-1]
        assert created.title == "New"
        assert created.offset_px == 0.0

    def test_create_without_save(self, cli, populated_gateway):
        assert cli.create_set("Draft", anchor=0, save=False) == 0
        assert len(reload_sets(populated_gateway)) == 2

    def test_delete(self, cli, populated_gateway):
        assert cli.delete_set(0) == 0
        assert [s.title for s in reload_sets(populated_gateway)] == ["Battery"]

    def test_edit(self, cli, populated_gateway):
        assert cli.edit_set(0, ["title=Top", "font_size=14", "blur.has_blur=true", "color.color=#ff0000"]) == 0
        edited = reload_sets(populated_gateway)[0]
        assert edited.title == "Top"
        assert edited.font_size == 14.0
        assert edited.blur_details.has_blur is True
        assert edited.color_details.color == (255, 0, 0, 255)
        assert len(edited.widget_ids) == 2

    @pytest.mark.parametrize(
        "pair",
        [
            "widget_ids=[]",
            "identity=1",
            "nope=1",
            "blur.nope=1",
            "other.x=1",
            "color.color=notacolor",
            "scale=big",
            "scale=.inf",
            "blur.corner_radius=.nan",
        ],
    )
    def test_edit_invalid(self, cli, pair):
        with pytest.raises(ConfigurationError):
            cli.edit_set(0, [pair])


class TestWidgetCommands:
    """Test widget commands"""

    def test_add(self, cli, populated_gateway, capsys):
        assert cli.add_widget(1, "text", ["text=true"]) == 0
        assert "Added Text Label widget to 'Battery'" in capsys.readouterr().out
        widget = reload_sets(populated_gateway)[1].widget_ids[-1]
        assert widget.module == WidgetModule.TEXT
        assert widget.config == {"text": "true"}

    def test_add_typed_options(self, cli, populated_gateway):
        assert cli.add_widget(1, "network", ["isUp=true", "speedIcon=1"]) == 0
        widget = reload_sets(populated_gateway)[1].widget_ids[-1]
        assert widget.config == {"isUp": True, "speedIcon": 1}

    def test_add_unknown_module(self, cli):
        with pytest.raises(ConfigurationError):
            cli.add_widget(0, "clock", [])

    def test_remove(self, cli, populated_gateway):
        assert cli.remove_widget(0, 0) == 0
        widgets = reload_sets(populated_gateway)[0].widget_ids
        assert [w.module for w in widgets] == [WidgetModule.TIME]

    def test_remove_invalid_position(self, cli):
        with pytest.raises(ConfigurationError):
            cli.remove_widget(0, 9)

    def test_move_saves(self, cli, populated_gateway):
        assert cli.move_widgets(0, [1], 0) == 0
        widgets = reload_sets(populated_gateway)[0].widget_ids
        assert [w.module for w in widgets] == [WidgetModule.TIME, WidgetModule.NETWORK]

    def test_configure_merges(self, cli, populated_gateway):
        assert cli.configure_widget(0, 0, ["minUnit=2"]) == 0
        config = reload_sets(populated_gateway)[0].widget_ids[0].config
        assert config == {"isUp": True, "speedIcon": 1, "minUnit": 2}

    def test_configure_unsets(self, cli, populated_gateway):
        assert cli.configure_widget(0, 0, ["speedIcon="]) == 0
        config = reload_sets(populated_gateway)[0].widget_ids[0].config
        assert config == {"isUp": True}

    def test_configure_keeps_empty_time_format(self, cli, populated_gateway):
        assert cli.configure_widget(0, 1, ["dateFormat="]) == 0
        # Time formats are not text options, so an empty format is kept
        assert reload_sets(populated_gateway)[0].widget_ids[1].config == {"dateFormat": ""}

    def test_catalog(self, cli, capsys):
        assert cli.show_catalog() == 0
        out = capsys.readouterr().out
        for name in ["Date", "Network", "Web Page", "Battery Capacity"]:
            assert name in out
        assert "options: isUp=False" in out
        assert "minUnit: 0=b, 1=Kb, 2=Mb, 3=Gb" in out
        assert "batteryValueType: 0=Watts, 1=Charging Current, 2=Amperage, 3=Charge Cycles" in out

    def test_preview(self, cli, capsys):
        assert cli.preview_widget(1, 1) == 0
        assert capsys.readouterr().out.strip() == "ϟ"

    def test_preview_png(self, cli, tmp_path):
        output = tmp_path / "preview.png"
        assert cli.preview_widget(0, 0, str(output)) == 0
        assert output.read_bytes().startswith(b"\x89PNG")


class TestSettingsCommands:
    """Test settings, reset and lookup commands"""

    def test_show(self, capsys):
        gateway = MemoryGateway({DEFAULT_PREFERENCES_PATH: {"apiKey": "abcdefgh"}})
        assert HeliumCLI(gateway=gateway).show_settings() == 0
        out = capsys.readouterr().out
        assert "date_locale: 'en_US'" in out
        assert "abcdefgh" not in out

    def test_set(self, cli, populated_gateway):
        assert cli.set_settings(["date_locale=zh_CN", "debug_border=true"]) == 0
        settings = AppSettings.load(populated_gateway)
        assert settings.date_locale == "zh_CN"
        assert settings.debug_border is True

    def test_set_unsupported_locale(self, cli):
        with pytest.raises(ConfigurationError):
            cli.set_settings(["date_locale=fr_FR"])

    def test_set_unknown_key(self, cli):
        with pytest.raises(ConfigurationError):
            cli.set_settings(["theme=dark"])

    def test_reset(self, cli, populated_gateway):
        assert cli.reset(assume_yes=True) == 0
        assert populated_gateway.get(DEFAULT_PREFERENCES_PATH, WIDGET_PROPERTIES_KEY) is None
        assert cli.store.widget_sets == []

    def test_reset_declined(self, cli, populated_gateway):
        with patch("builtins.input", return_value="n"):
            assert cli.reset() == 1
        assert len(reload_sets(populated_gateway)) == 2

    def test_locations_requires_api_key(self, cli, capsys):
        assert cli.search_locations("Beijing") == 1
        assert "No weather API key" in capsys.readouterr().out

    def test_locations(self, capsys):
        gateway = MemoryGateway({DEFAULT_PREFERENCES_PATH: {"apiKey": "k"}})
        location = Location("101010100", "Beijing", "China", "Beijing", "Beijing", "39.9", "116.4")
        with patch("helium.cli.fetch_locations", return_value=[location]) as mock_fetch:
            assert HeliumCLI(gateway=gateway).search_locations("Beijing") == 0
        mock_fetch.assert_called_once_with("Beijing", "k", "en_US")
        assert "101010100  Beijing" in capsys.readouterr().out

    def test_device(self, cli, capsys):
        with patch("helium.cli.get_device_name", return_value="iPhone15,2"):
            assert cli.show_device() == 0
        assert "notch: dynamic_island" in capsys.readouterr().out


class TestMain:
    """Test the entry point end to end"""

    def test_parser_requires_widget_move_destination(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args(["widget", "move", "0", "1"])

    def test_no_command_shows_help(self, tmp_path):
        assert main(["--data-dir", str(tmp_path)]) == 1

    def test_create_and_list(self, tmp_path, capsys):
        assert main(["--data-dir", str(tmp_path), "create", "Main", "--anchor", "center"]) == 0
        assert main(["--data-dir", str(tmp_path), "widget", "add", "0", "network", "isUp=true"]) == 0
        assert main(["--data-dir", str(tmp_path), "list"]) == 0
        assert "[0] Main (1 widget(s), anchor center)" in capsys.readouterr().out

        stored = YamlFileGateway(str(tmp_path)).get(DEFAULT_PREFERENCES_PATH, WIDGET_PROPERTIES_KEY)
        assert stored[0]["widgetIDs"] == [{"widgetID": 2, "isUp": True}]

    def test_errors_return_one(self, tmp_path, capsys):
        assert main(["--data-dir", str(tmp_path), "show", "0"]) == 1
        assert "Error: No widget set at position 0" in capsys.readouterr().out

    def test_invalid_path_returns_one(self, tmp_path):
        assert main(["--data-dir", str(tmp_path), "--path", "../x", "list"]) == 1

    def test_reload_command(self, tmp_path):
        import subprocess

        assert main(
            ["--data-dir", str(tmp_path), "--reload-command", "notify {name}", "create", "Main"]
        ) == 0
        subprocess.Popen.assert_called_once()

    def test_overlay_restart_on_create(self, tmp_path):
        import subprocess

        assert main(
            [
                "--data-dir", str(tmp_path),
                "--overlay-status-command", "pgrep hud",
                "--overlay-start-command", "start hud",
                "--overlay-stop-command", "stop hud",
                "create", "Main",
            ]
        ) == 0
        commands = [c[0][0] for c in subprocess.run.call_args_list]
        assert commands == ["pgrep hud", "stop hud", "start hud"]
