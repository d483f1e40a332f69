"""
Language manager for the label setup dialog.

Loads gettext catalogs from label_setup/config/locale/ and the per-tab help
texts from help.yaml next to them. The language is chosen once at startup
from the "language" key of config/window.json ("system" follows the OS).
Default language: English (en)
"""

import os
import re
import sys
import json
import gettext
import logging

import yaml
from PyQt6.QtCore import QLocale

DOMAIN = "labelsetup"

_ESCAPES = {"n": "\n", "t": "\t", '"': '"', "\\": "\\"}
_ESCAPE_RE = re.compile(r'\\(.)')
_PO_LINE_RE = re.compile(r'^(msgctxt|msgid|msgid_plural|msgstr(?:\[\d+\])?)\s+"(.*)"$')


def _default_config_dir() -> str:
    if getattr(sys, 'frozen', False) and hasattr(sys, '_MEIPASS'):
        # Use external directory next to EXE so translations stay editable
        return os.path.join(os.path.dirname(sys.executable), "config")
    return os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "config")


def _unquote(text: str) -> str:
    """Body of a .po string literal -> text. Unknown escapes are kept as written."""
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(0)), text)


def parse_po(lines) -> dict:
    """
    msgid -> msgstr for every translated, non-plural entry without context.
    The header (empty msgid) and untranslated entries are skipped.
    """
    catalog = {}
    entry = {}
    key = None

    def flush():
        if "msgctxt" in entry or "msgid_plural" in entry:
            return
        msgid, msgstr = entry.get("msgid"), entry.get("msgstr")
        if msgid and msgstr:
            catalog[msgid] = msgstr

    for raw in lines:
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        m = _PO_LINE_RE.match(line)
        if m:
            if m.group(1) in ("msgctxt", "msgid") and any(k.startswith("msgstr") for k in entry):
                flush()
                entry = {}
            key = m.group(1)
            entry[key] = _unquote(m.group(2))
        elif line.startswith('"') and line.endswith('"') and key is not None:
            entry[key] += _unquote(line[1:-1])
    flush()
    return catalog


class LangManager:
    """
    Language manager for internationalization using gettext.
    Use get_lang_manager() for the shared instance.
    """

    def __init__(self, config_dir: str = None):
        self.logger = logging.getLogger("LangManager")

        config_dir = config_dir or _default_config_dir()
        self.locale_dir = os.path.join(config_dir, "locale")
        self.config_path = os.path.join(config_dir, "window.json")

        self._current_lang_code = "en"
        self._translator = None
        self._catalog = {}
        self._help = None

        saved_lang = self._load_saved_language()
        if saved_lang == "system":
            saved_lang = self._get_system_language()
        if saved_lang and saved_lang != "en" and not self._load_language(saved_lang):
            self.logger.warning(f"Falling back to English, no catalog for: {saved_lang}")

    def _get_system_language(self) -> str:
        """Determine system language (ja or en) via QLocale."""
        if QLocale.system().name().startswith("ja"):
            return "ja"
        return "en"

    def _load_saved_language(self) -> str:
        """Load saved language preference from window.json."""
        if not os.path.exists(self.config_path):
            return None
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
            return config.get('language', None)
        except (OSError, ValueError, AttributeError) as e:
            self.logger.warning(f"Failed to load language from window.json: {e}")
            return None

    def _load_language(self, lang_code: str) -> bool:
        lc_dir = os.path.join(self.locale_dir, lang_code, "LC_MESSAGES")
        mo_path = os.path.join(lc_dir, f"{DOMAIN}.mo")
        po_path = os.path.join(lc_dir, f"{DOMAIN}.po")

        if os.path.exists(mo_path):
            try:
                self._translator = gettext.translation(
                    DOMAIN, localedir=self.locale_dir, languages=[lang_code], fallback=False)
                self._current_lang_code = lang_code
                self.logger.info(f"Loaded language from .mo: {lang_code}")
                return True
            except OSError as e:
                self.logger.warning(f"Failed to load .mo file ({lang_code}): {e!r}")
                self._translator = None

        if os.path.exists(po_path):
            try:
                with open(po_path, 'r', encoding='utf-8') as f:
                    self._catalog = parse_po(f)
            except OSError as e:
                self.logger.error(f"Failed to read .po file: {e}")
                return False
            self._current_lang_code = lang_code
            self.logger.info(f"Parsed .po file directly: {len(self._catalog)} strings ({lang_code})")
            return True
        return False

    def gettext(self, message: str) -> str:
        """Translate a message."""
        if self._translator:
            return self._translator.gettext(message)
        return self._catalog.get(message) or message

    @property
    def current_language(self) -> str:
        return self._current_lang_code

    # =========================================================================
    # Tab help (YAML-based)
    # =========================================================================

    def _load_help_yaml(self, lang_code: str) -> dict:
        yaml_path = os.path.join(self.locale_dir, lang_code, "help.yaml")
        if not os.path.exists(yaml_path):
            return {}
        try:
            with open(yaml_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Failed to load help.yaml ({lang_code}): {e}")
            return {}
        return data.get("tab_help") or {}

    def get_tab_help(self, tab_id: str):
        """Help text for an editor tab in the current language, or None."""
        if self._help is None:
            self._help = self._load_help_yaml(self._current_lang_code)
        text = self._help.get(tab_id)
        if text is None and self._current_lang_code != "en":
            # 未翻訳のタブは英語にフォールバック
            text = self._load_help_yaml("en").get(tab_id)
        return text.strip() if text else None


_lang_manager = None


def get_lang_manager() -> LangManager:
    """Get or create the shared LangManager instance."""
    global _lang_manager
    if _lang_manager is None:
        _lang_manager = LangManager()
    return _lang_manager


def _(message: str) -> str:
    """Translate a message. Standard gettext shorthand."""
    return get_lang_manager().gettext(message)
