"""
SAAS persisted configuration.

ShellOptions is the single persisted object: the saved shell configurations,
the name of the active one and the alias table. It is stored as JSON:

    {
        "active": "default",
        "configs": {
            "default": {"background": [0, 0, 0], "foreground": [255, 255, 255],
                        "font": "Courier New", "prompt": "#> "}
        },
        "aliases": {"print": "echo", "man": "help"}
    }

The default location is ~/.saas/options.json; the SAAS_HOME environment
variable replaces ~/.saas.
"""
import json
import logging
import os
from collections import namedtuple
from pathlib import Path

from .aliases import AliasTable
from .commands import catalog
from .utils import *

logger = logging.getLogger(__name__)

DEFAULT_FONT = "Courier New"
DEFAULT_PROMPT = "#> "
DEFAULT_CONFIG = "default"

Color = namedtuple("Color", ["red", "green", "blue"])


class ShellConfiguration(namedtuple("ShellConfiguration", ["name", "background", "foreground", "font", "prompt"])):
    """
    Named snapshot of the look of a session.
    """
    __slots__ = ()

    @classmethod
    def default(cls, name=DEFAULT_CONFIG, /):
        return cls(name, Color(0, 0, 0), Color(255, 255, 255), DEFAULT_FONT, DEFAULT_PROMPT)

    @classmethod
    def from_session(cls, name, session, /):
        terminal = session.terminal
        return cls(name, Color(*terminal.background), Color(*terminal.foreground), terminal.font, session.prompt)

    def dump(self):
        return {
            "background": list(self.background),
            "foreground": list(self.foreground),
            "font": self.font,
            "prompt": self.prompt,
        }

    @classmethod
    def restore(cls, name, data, /):
        return cls(name, Color(*data["background"]), Color(*data["foreground"]), str(data["font"]), str(data["prompt"]))


def default_path():
    return Path(os.environ.get("SAAS_HOME", Path.home() / ".saas")) / "options.json"


class ShellOptions:
    """
    Configurations, active configuration name and aliases of the shell.

    Parameters
    - configs: mapping name -> ShellConfiguration
    - active: name of the active configuration, or None
    - aliases: AliasTable; defaults to the aliases declared by the shell
      commands of the catalog
    - path: JSON file used by save(); Unset disables saving
    """

    def __init__(self, configs=(), active=None, aliases=Unset, *, path=Unset):
        self.configs = dict(configs)
        self.active = active
        self.aliases = AliasTable(catalog.aliases() if aliases is Unset else aliases)
        self.path = Path(path) if path is not Unset else Unset

    @property
    def directory(self):
        """
        Directory holding the options file, where save data lives too.
        """
        return self.path.parent if self.path is not Unset else Unset

    @classmethod
    def load(cls, path=Unset, /):
        """
        Read the options file.

        Returns fresh options bound to path when the file does not exist.

        Raises
        - ValueError when the file exists but cannot be understood.
        """
        path = Path(coalesce(path, default_path()))
        if not path.exists():
            logger.debug("no shell options at %s, using defaults", path)
            return cls(path=path)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            configs = {
                name: ShellConfiguration.restore(name, config)
                for name, config in data["configs"].items()
            }
            active = data.get("active")
            aliases = AliasTable({str(name): str(body) for name, body in data["aliases"].items()})
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as error:
            raise ValueError("corrupted shell options") from error

        logger.debug("loaded shell options from %s", path)
        return cls(configs, active, aliases, path=path)

    def dump(self):
        return {
            "active": self.active,
            "configs": {name: config.dump() for name, config in self.configs.items()},
            "aliases": dict(self.aliases),
        }

    def save(self):
        """
        Write the options file. Returns whether it was written.
        """
        if self.path is Unset:
            return False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.dump(), indent=4), encoding="utf-8")
        except OSError as error:
            logger.warning("shell options could not be saved to %s: %s", self.path, error)
            return False
        logger.debug("saved shell options to %s", self.path)
        return True

    def active_configuration(self):
        """
        Return the active configuration, falling back to (and creating) the
        default one when the active name is unset or unknown.
        """
        if self.active not in self.configs:
            self.configs.setdefault(DEFAULT_CONFIG, ShellConfiguration.default())
            self.active = DEFAULT_CONFIG
        return self.configs[self.active]

    def is_active(self, config, /):
        return self.active == getattr(config, "name", config)

    def activate(self, config, /):
        self.active = getattr(config, "name", config)


__all__ = (
    "Color",
    "ShellConfiguration",
    "ShellOptions",
    "DEFAULT_CONFIG",
    "DEFAULT_FONT",
    "DEFAULT_PROMPT",
    "default_path",
)
