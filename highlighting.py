"""
Language registration for the highlighter.

A language is registered once per process under a fixed id: an ordered
grammar of (pattern, label) pairs plus a label -> colour theme. Editors
look the language up by id when they re-highlight.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from lexer import Lexer, TokenClass, TOKEN_RULES, produced_classes
from theme import THEME

logger = logging.getLogger(__name__)

LANGUAGE_ID = "blockpipe"


class RegistrationError(Exception):
    pass


@dataclass(frozen=True)
class LanguageDefinition:
    language_id: str
    rules: Tuple[tuple, ...]
    theme: Tuple[tuple, ...]

    @property
    def grammar(self):
        """Ordered (pattern, label) pairs."""
        return [(pattern, token_class.label) for pattern, token_class in self.rules]

    @property
    def colors(self) -> Dict[str, str]:
        return {token_class.label: color for token_class, color in self.theme}

    def color_for(self, token_class: TokenClass) -> str:
        for cls, color in self.theme:
            if cls is token_class:
                return color
        raise KeyError(token_class)


class LanguageRegistry:
    def __init__(self):
        self._languages: Dict[str, LanguageDefinition] = {}

    def register(self, language_id, rules=TOKEN_RULES, theme=None) -> LanguageDefinition:
        rules = tuple(rules)
        theme = dict(THEME if theme is None else theme)
        missing = produced_classes(rules) - theme.keys()
        if missing:
            names = ", ".join(sorted(c.name for c in missing))
            raise RegistrationError(f"Theme for {language_id!r} has no colour for: {names}")
        definition = LanguageDefinition(
            language_id=language_id,
            rules=rules,
            # sorted so that equal themes compare equal whatever their key order
            theme=tuple(sorted(theme.items(), key=lambda item: item[0].label)),
        )
        existing = self._languages.get(language_id)
        if existing is not None:
            if existing != definition:
                raise RegistrationError(
                    f"Language {language_id!r} is already registered with a different grammar")
            logger.debug(f"Language {language_id!r} already registered")
            return existing
        self._languages[language_id] = definition
        logger.info(f"Registered language {language_id!r} ({len(definition.rules)} rules)")
        return definition

    def is_registered(self, language_id) -> bool:
        return language_id in self._languages

    def get(self, language_id) -> LanguageDefinition:
        definition = self._languages.get(language_id)
        if definition is None:
            raise RegistrationError(f"Language {language_id!r} is not registered")
        return definition

    def grammar(self, language_id):
        return self.get(language_id).grammar

    def theme_for(self, language_id) -> Dict[str, str]:
        return self.get(language_id).colors

    def tokenize(self, language_id, source):
        return Lexer(source, self.get(language_id).rules).tokenize()


REGISTRY = LanguageRegistry()


def ensure_registered(registry: Optional[LanguageRegistry] = None, rules=TOKEN_RULES) -> LanguageDefinition:
    """Register BlockPipe once per registry; later calls return the first definition."""
    registry = registry if registry is not None else REGISTRY
    if registry.is_registered(LANGUAGE_ID):
        return registry.get(LANGUAGE_ID)
    return registry.register(LANGUAGE_ID, rules, THEME)
