#!/usr/bin/env python3
"""
Helium CLI - command-line editor for the overlay's widget sets.

Widget sets and widgets are addressed by their zero-based position as shown
by ``heliumctl list`` and ``heliumctl show``.
"""

import argparse
import logging
import math
import sys
from dataclasses import fields
from typing import Any, Dict, List, Optional

import yaml

from .config.codec import ConfigCodec
from .config.gateway import (
    DEFAULT_PREFERENCES_DIR,
    DEFAULT_PREFERENCES_PATH,
    PersistenceGateway,
    YamlFileGateway,
)
from .config.models import (
    EDITABLE_SET_ATTRIBUTES,
    Anchor,
    WidgetInstance,
    WidgetSet,
    parse_color,
)
from .config.settings import SUPPORTED_LOCALES, AppSettings, reset_user_data
from .device.renderer import PreviewRenderer, to_png_bytes
from .device.scale import get_device_name, get_notch_size
from .managers.widget import registry
from .managers.widget_set import WidgetSetStore
from .platforms.base import OverlayHost
from .platforms.command import CommandOverlayHost
from .platforms.notifier import CommandReloadNotifier, NullReloadNotifier, ReloadNotifier
from .utils.errors import ConfigurationError, HeliumError
from .widgets.base import WidgetModule
from .widgets.catalog import widget_example, widget_name
from .widgets.weather import fetch_locations

logger = logging.getLogger(__name__)

# Nested set attributes editable as "<prefix>.<field>"
_NESTED = {"blur": "blur_details", "color": "color_details"}


def parse_assignments(pairs: List[str]) -> Dict[str, str]:
    """
    Split ``key=value`` arguments.

    Raises:
        ConfigurationError: If an argument has no ``=``
    """
    assignments = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigurationError(f"Expected key=value, got {pair!r}")
        assignments[key.strip()] = value
    return assignments


def parse_value(raw: str, default: Any = None) -> Any:
    """
    Interpret a command-line value.

    Options whose default is a string take the text verbatim. Anything else
    is read as a YAML scalar, so ``true``, ``12`` and ``1.5`` get their
    natural types. An empty value means "unset" (None).
    """
    if isinstance(default, str):
        return raw
    if raw == "":
        return None
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse value {raw!r}: {e}") from e


def convert_like(name: str, raw: str, current: Any) -> Any:
    """
    Parse a value and check it against the type of the current one.

    Raises:
        ConfigurationError: On a type mismatch
    """
    value = parse_value(raw, current)
    if isinstance(current, bool):
        ok = isinstance(value, bool)
    elif isinstance(current, int):
        ok = isinstance(value, int) and not isinstance(value, bool)
    elif isinstance(current, float):
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        if ok:
            try:
                value = float(value)
            except OverflowError:
                ok = False
            else:
                ok = math.isfinite(value)
    else:
        ok = isinstance(value, type(current))

    if not ok:
        raise ConfigurationError(
            f"{name} expects {type(current).__name__}, got {raw!r}"
        )
    return value


def parse_anchor(value: str) -> int:
    """Parse an anchor given as a name (left, center, right) or number."""
    try:
        return int(Anchor[value.upper()])
    except KeyError:
        pass
    try:
        return int(Anchor(int(value)))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid anchor: {value}")


class HeliumCLI:
    """Main CLI handler for Helium commands."""

    def __init__(
        self,
        data_dir: str = DEFAULT_PREFERENCES_DIR,
        path: str = DEFAULT_PREFERENCES_PATH,
        reload_command: Optional[str] = None,
        overlay_host: Optional[OverlayHost] = None,
        gateway: Optional[PersistenceGateway] = None,
    ) -> None:
        self.gateway: PersistenceGateway = gateway or YamlFileGateway(data_dir)
        self.path: str = path
        self.notifier: ReloadNotifier = (
            CommandReloadNotifier(reload_command) if reload_command else NullReloadNotifier()
        )
        self.overlay_host = overlay_host
        self._store: Optional[WidgetSetStore] = None

    @property
    def store(self) -> WidgetSetStore:
        """Widget-set store, loaded on first use."""
        if self._store is None:
            self._store = WidgetSetStore(
                self.gateway,
                notifier=self.notifier,
                overlay_host=self.overlay_host,
                path=self.path,
            )
        return self._store

    def load_settings(self) -> AppSettings:
        return AppSettings.load(self.gateway, self.path)

    def _get_set(self, index: int) -> WidgetSet:
        sets = self.store.widget_sets
        if not 0 <= index < len(sets):
            raise ConfigurationError(f"No widget set at position {index} ({len(sets)} defined)")
        return sets[index]

    def _get_widget(self, widget_set: WidgetSet, index: int) -> WidgetInstance:
        if not 0 <= index < len(widget_set.widget_ids):
            raise ConfigurationError(
                f"No widget at position {index} in {widget_set.title!r} "
                f"({len(widget_set.widget_ids)} defined)"
            )
        return widget_set.widget_ids[index]

    def _widget_defaults(self, module: WidgetModule) -> Dict[str, Any]:
        widget_class = registry.get_widget_class(module)
        return widget_class.defaults if widget_class else {}

    def _parse_widget_config(self, module: WidgetModule, pairs: List[str]) -> Dict[str, Any]:
        defaults = self._widget_defaults(module)
        return {
            key: parse_value(raw, defaults.get(key))
            for key, raw in parse_assignments(pairs).items()
        }

    def list_sets(self) -> int:
        """List all widget sets."""
        sets = self.store.widget_sets
        if not sets:
            print("No widget sets defined.")
            print("\nCreate one with: heliumctl create <title>")
            return 0

        for i, widget_set in enumerate(sets):
            marker = "●" if widget_set.is_enabled else "○"
            try:
                anchor = Anchor(widget_set.anchor).name.lower()
            except ValueError:
                anchor = str(widget_set.anchor)
            print(
                f"  {marker} [{i}] {widget_set.title} "
                f"({len(widget_set.widget_ids)} widget(s), anchor {anchor})"
            )
        return 0

    def show_set(self, index: int) -> int:
        """Show a widget set's attributes and widget previews."""
        widget_set = self._get_set(index)
        settings = self.load_settings()
        renderer = PreviewRenderer()

        encoded = ConfigCodec().encode([widget_set])[0]
        encoded.pop("widgetIDs")
        encoded["colorDetails"]["color"] = "#{:02x}{:02x}{:02x}{:02x}".format(
            *widget_set.color_details.color
        )
        print(yaml.safe_dump(encoded, sort_keys=False, allow_unicode=True).rstrip())

        print("widgets:")
        if not widget_set.widget_ids:
            print("  (none)")
        for i, widget in enumerate(widget_set.widget_ids):
            preview = renderer.preview_text(widget, settings)
            print(f"  [{i}] {widget_name(widget.module)}: {preview}")
            for key, value in widget.config.items():
                print(f"        {key}: {value!r}")
        return 0

    def create_set(self, title: str, anchor: int, save: bool = True) -> int:
        """Create a widget set with the standard defaults."""
        created = self.store.create_widget_set(title, anchor=anchor, auto_save=save)
        print(f"Created widget set {created.title!r} at position {len(self.store) - 1}")
        return 0

    def delete_set(self, index: int) -> int:
        """Delete a widget set."""
        widget_set = self._get_set(index)
        self.store.remove_widget_set(widget_set)
        print(f"Deleted widget set {widget_set.title!r}")
        return 0

    def edit_set(self, index: int, pairs: List[str]) -> int:
        """
        Change widget set attributes.

        Keys are attribute names (``title``, ``font_size``, ...) or nested
        ``blur.<field>`` / ``color.<field>``. ``color.color`` accepts any CSS
        color.
        """
        widget_set = self._get_set(index)
        details = self._get_set(index)

        for key, raw in parse_assignments(pairs).items():
            prefix, _, field_name = key.partition(".")
            if field_name:
                if prefix not in _NESTED:
                    raise ConfigurationError(f"Unknown widget set attribute: {key}")
                nested = getattr(details, _NESTED[prefix])
                if field_name not in {f.name for f in fields(nested)}:
                    raise ConfigurationError(f"Unknown widget set attribute: {key}")
                if prefix == "color" and field_name == "color":
                    try:
                        value = parse_color(raw)
                    except ValueError as e:
                        raise ConfigurationError(f"Invalid color {raw!r}: {e}") from e
                else:
                    value = convert_like(key, raw, getattr(nested, field_name))
                setattr(nested, field_name, value)
            else:
                if key not in EDITABLE_SET_ATTRIBUTES or key in _NESTED.values():
                    raise ConfigurationError(f"Unknown widget set attribute: {key}")
                setattr(details, key, convert_like(key, raw, getattr(details, key)))

        self.store.edit_widget_set(widget_set, details)
        print(f"Updated widget set {details.title!r}")
        return 0

    def add_widget(self, index: int, module_name: str, pairs: List[str]) -> int:
        """Add a widget to a set."""
        widget_set = self._get_set(index)
        try:
            module = WidgetModule.from_name(module_name)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        config = self._parse_widget_config(module, pairs)
        self.store.add_widget(widget_set, module, config)
        print(f"Added {widget_name(module)} widget to {widget_set.title!r}")
        return 0

    def remove_widget(self, index: int, widget_index: int) -> int:
        """Remove a widget from a set."""
        widget_set = self._get_set(index)
        widget = self._get_widget(widget_set, widget_index)
        self.store.remove_widget(widget_set, widget)
        print(f"Removed {widget_name(widget.module)} widget from {widget_set.title!r}")
        return 0

    def move_widgets(self, index: int, from_indices: List[int], to_index: int) -> int:
        """Move widgets within a set and save the new order."""
        widget_set = self._get_set(index)
        for widget_index in from_indices:
            self._get_widget(widget_set, widget_index)

        self.store.move_widget(widget_set, from_indices, to_index)
        self.store.save()
        print(f"Reordered widgets in {widget_set.title!r}")
        return 0

    def configure_widget(self, index: int, widget_index: int, pairs: List[str]) -> int:
        """
        Change widget options.

        Given keys are merged into the current options; an empty value unsets
        the option so its default applies again.
        """
        widget_set = self._get_set(index)
        widget = self._get_widget(widget_set, widget_index)

        new_widget = WidgetInstance(module=widget.module, config=dict(widget.config))
        new_widget.config.update(self._parse_widget_config(widget.module, pairs))
        new_widget.modified = True

        self.store.update_widget_config(widget_set, widget, new_widget)
        print(f"Updated {widget_name(widget.module)} widget in {widget_set.title!r}")
        return 0

    def show_catalog(self) -> int:
        """List every widget module with its example text."""
        for module in WidgetModule:
            widget_class = registry.get_widget_class(module)
            defaults = widget_class.defaults if widget_class else {}
            choices = widget_class.choices if widget_class else {}
            print(
                f"  {module.value:2d} {module.name.lower():<17} "
                f"{widget_name(module):<20} {widget_example(module)}"
            )
            if defaults:
                options = ", ".join(f"{k}={v!r}" for k, v in defaults.items())
                print(f"     options: {options}")
            for key, labels in choices.items():
                values = ", ".join(f"{i}={label}" for i, label in enumerate(labels))
                print(f"     {key}: {values}")
        return 0

    def preview_widget(self, index: int, widget_index: int, output: Optional[str] = None) -> int:
        """Print a widget's preview text, optionally rendering it to a PNG."""
        widget_set = self._get_set(index)
        widget = self._get_widget(widget_set, widget_index)
        settings = self.load_settings()
        renderer = PreviewRenderer()

        print(renderer.preview_text(widget, settings))

        if output:
            image = renderer.render(widget, widget_set, settings)
            try:
                with open(output, "wb") as f:
                    f.write(to_png_bytes(image))
            except OSError as e:
                print(f"Cannot write preview to {output}: {e}")
                return 1
            print(f"Preview written to {output}")
        return 0

    def show_settings(self) -> int:
        """Print the app settings."""
        settings = self.load_settings()
        for field in fields(settings):
            value = getattr(settings, field.name)
            if field.name == "api_key" and value:
                value = value[:4] + "…"
            print(f"  {field.name}: {value!r}")
        return 0

    def set_settings(self, pairs: List[str]) -> int:
        """Change app settings and tell the overlay to reload."""
        settings = self.load_settings()
        names = {field.name for field in fields(settings)}

        for key, raw in parse_assignments(pairs).items():
            if key not in names:
                raise ConfigurationError(f"Unknown setting: {key}")
            value = convert_like(key, raw, getattr(settings, key))
            if key == "date_locale" and value not in SUPPORTED_LOCALES:
                raise ConfigurationError(
                    f"Unsupported locale {value!r} (supported: {', '.join(SUPPORTED_LOCALES)})"
                )
            setattr(settings, key, value)

        settings.save(self.gateway, self.path, self.notifier)
        print("Settings saved.")
        return 0

    def reset(self, assume_yes: bool = False) -> int:
        """Delete all widget sets and settings."""
        if not assume_yes:
            response = input("Delete all widget sets and settings? [y/N] ")
            if response.lower() != "y":
                print("Aborted.")
                return 1

        reset_user_data(self.gateway, self.path)
        self._store = None
        self.notifier.notify()
        print("All user data deleted.")
        return 0

    def search_locations(self, name: str) -> int:
        """Search weather locations by name."""
        settings = self.load_settings()
        if not settings.api_key:
            print("No weather API key configured.")
            print("\nSet one with: heliumctl settings set api_key=<key>")
            return 1

        locations = fetch_locations(name, settings.api_key, settings.date_locale)
        if not locations:
            print(f"No locations found for {name!r}.")
            return 1

        for location in locations:
            print(
                f"  {location.id}  {location.name}, {location.region2}, "
                f"{location.region1}, {location.country}"
            )
        return 0

    def show_device(self) -> int:
        """Print the device model and its notch size."""
        model = get_device_name()
        print(f"  model: {model or 'unknown'}")
        print(f"  notch: {get_notch_size(model).name.lower()}")
        return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="heliumctl",
        description="Helium - widget-set editor for the status-bar overlay",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  heliumctl list                              # List widget sets
  heliumctl create Main --anchor center       # New centered widget set
  heliumctl widget add 0 network isUp=true    # Add an upload speed widget
  heliumctl widget config 0 0 speedIcon=1     # Use plain arrows
  heliumctl widget move 0 2 --to 0            # Move third widget first
  heliumctl edit 0 font_size=12 blur.has_blur=true
  heliumctl preview 0 0 --output widget.png   # Render a preview
  heliumctl settings set date_locale=zh_CN
""",
    )

    parser.add_argument(
        "--data-dir", default=DEFAULT_PREFERENCES_DIR, help="Preferences directory"
    )
    parser.add_argument(
        "--path", default=DEFAULT_PREFERENCES_PATH, help="Preferences namespace"
    )
    parser.add_argument(
        "--reload-command",
        help="Shell command posting the reload notification ({name} is replaced)",
    )
    parser.add_argument("--overlay-status-command", help="Exits 0 while the overlay runs")
    parser.add_argument("--overlay-start-command", help="Starts the overlay")
    parser.add_argument("--overlay-stop-command", help="Stops the overlay")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list", help="List widget sets")

    show_parser = subparsers.add_parser("show", help="Show a widget set")
    show_parser.add_argument("set", type=int, help="Widget set position")

    create_parser_ = subparsers.add_parser("create", help="Create a widget set")
    create_parser_.add_argument("title", help="Widget set title")
    create_parser_.add_argument(
        "--anchor", type=parse_anchor, default=int(Anchor.LEFT), help="left, center or right"
    )
    create_parser_.add_argument("--no-save", action="store_true", help="Don't persist")

    delete_parser = subparsers.add_parser("delete", help="Delete a widget set")
    delete_parser.add_argument("set", type=int, help="Widget set position")

    edit_parser = subparsers.add_parser("edit", help="Edit widget set attributes")
    edit_parser.add_argument("set", type=int, help="Widget set position")
    edit_parser.add_argument("assignments", nargs="+", metavar="key=value")

    # Widget subcommands
    widget_parser = subparsers.add_parser("widget", help="Widget management")
    widget_subparsers = widget_parser.add_subparsers(dest="widget_command")

    add_parser = widget_subparsers.add_parser("add", help="Add a widget")
    add_parser.add_argument("set", type=int, help="Widget set position")
    add_parser.add_argument("module", help="Widget module (see catalog)")
    add_parser.add_argument("assignments", nargs="*", metavar="key=value")

    remove_parser = widget_subparsers.add_parser("remove", help="Remove a widget")
    remove_parser.add_argument("set", type=int, help="Widget set position")
    remove_parser.add_argument("widget", type=int, help="Widget position")

    move_parser = widget_subparsers.add_parser("move", help="Reorder widgets")
    move_parser.add_argument("set", type=int, help="Widget set position")
    move_parser.add_argument("sources", type=int, nargs="+", help="Widget positions to move")
    move_parser.add_argument("--to", type=int, required=True, help="Destination position")

    config_parser = widget_subparsers.add_parser("config", help="Change widget options")
    config_parser.add_argument("set", type=int, help="Widget set position")
    config_parser.add_argument("widget", type=int, help="Widget position")
    config_parser.add_argument("assignments", nargs="+", metavar="key=value")

    subparsers.add_parser("catalog", help="List widget modules")

    preview_parser = subparsers.add_parser("preview", help="Preview a widget")
    preview_parser.add_argument("set", type=int, help="Widget set position")
    preview_parser.add_argument("widget", type=int, help="Widget position")
    preview_parser.add_argument("-o", "--output", help="Write a PNG preview")

    # Settings subcommands
    settings_parser = subparsers.add_parser("settings", help="App settings")
    settings_subparsers = settings_parser.add_subparsers(dest="settings_command")
    settings_subparsers.add_parser("show", help="Show settings")
    settings_set_parser = settings_subparsers.add_parser("set", help="Change settings")
    settings_set_parser.add_argument("assignments", nargs="+", metavar="key=value")

    reset_parser = subparsers.add_parser("reset", help="Delete all user data")
    reset_parser.add_argument("-y", "--yes", action="store_true", help="Don't ask")

    locations_parser = subparsers.add_parser("locations", help="Search weather locations")
    locations_parser.add_argument("name", help="Location name")

    subparsers.add_parser("device", help="Show device model and notch size")

    return parser


def build_overlay_host(args: argparse.Namespace) -> Optional[OverlayHost]:
    """Overlay host from the command-line options, if configured."""
    if not (args.overlay_status_command and args.overlay_start_command):
        return None
    return CommandOverlayHost(
        status_command=args.overlay_status_command,
        enable_command=args.overlay_start_command,
        disable_command=args.overlay_stop_command,
    )


def run_command(cli: HeliumCLI, args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    """Dispatch parsed arguments to the CLI handler."""
    if args.command == "list":
        return cli.list_sets()

    elif args.command == "show":
        return cli.show_set(args.set)

    elif args.command == "create":
        return cli.create_set(args.title, args.anchor, save=not args.no_save)

    elif args.command == "delete":
        return cli.delete_set(args.set)

    elif args.command == "edit":
        return cli.edit_set(args.set, args.assignments)

    elif args.command == "widget":
        if args.widget_command == "add":
            return cli.add_widget(args.set, args.module, args.assignments)
        elif args.widget_command == "remove":
            return cli.remove_widget(args.set, args.widget)
        elif args.widget_command == "move":
            return cli.move_widgets(args.set, args.sources, args.to)
        elif args.widget_command == "config":
            return cli.configure_widget(args.set, args.widget, args.assignments)
        else:
            parser.print_help()
            return 1

    elif args.command == "catalog":
        return cli.show_catalog()

    elif args.command == "preview":
        return cli.preview_widget(args.set, args.widget, args.output)

    elif args.command == "settings":
        if args.settings_command == "show":
            return cli.show_settings()
        elif args.settings_command == "set":
            return cli.set_settings(args.assignments)
        else:
            parser.print_help()
            return 1

    elif args.command == "reset":
        return cli.reset(assume_yes=args.yes)

    elif args.command == "locations":
        return cli.search_locations(args.name)

    elif args.command == "device":
        return cli.show_device()

    # No command specified, show help
    parser.print_help()
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    cli = HeliumCLI(
        data_dir=args.data_dir,
        path=args.path,
        reload_command=args.reload_command,
        overlay_host=build_overlay_host(args),
    )

    try:
        return run_command(cli, args, parser)
    except HeliumError as e:
        print(f"Error: {e}")
        return 1
    except ValueError as e:
        logger.debug("Invalid input", exc_info=True)
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
