"""
Tour theme: shared colour palette, token colours and status styles.
Kept apart from tutorial_widget.py so the highlighter and the tests can
import constants without pulling in Tk.
"""
from lexer import TokenClass, produced_classes, TOKEN_RULES, LEGACY_TOKEN_RULES


class ThemeError(Exception):
    pass


# ── UI Colours  (Catppuccin Mocha) ──
COLORS = {
    "bg":           "#1e1e2e",
    "bg_secondary": "#181825",
    "bg_tertiary":  "#11111b",
    "surface":      "#313244",
    "overlay":      "#45475a",
    "text":         "#cdd6f4",
    "subtext":      "#a6adc8",
    "accent":       "#89b4fa",
    "lavender":     "#b4befe",
    "cursor":       "#f5e0dc",
    "selection":    "#45475a",
    "output_bg":    "#11111b",
    "border":       "#313244",
    "green":        "#2f9e44",
    "orange":       "#f08c00",
    "error":        "#f38ba8",
}

# ── Token Colours ──
THEME = {
    TokenClass.LEFT_PAREN:      "#FFC0CB",
    TokenClass.RIGHT_PAREN:     "#FFC0CB",
    TokenClass.LEFT_BRACE:      "#ADD8E6",
    TokenClass.RIGHT_BRACE:     "#ADD8E6",
    TokenClass.PIPE:            "#98FB98",
    TokenClass.PIPE_STAR:       "#98FB98",
    TokenClass.COLON:           "#FFD700",
    TokenClass.IDENTIFIER:      "#7B68EE",
    TokenClass.STRING_LITERAL:  "#FFA07A",
    TokenClass.BOOLEAN_LITERAL: "#FF69B4",
    TokenClass.INTEGER_LITERAL: "#FF4500",
    TokenClass.FLOAT_LITERAL:   "#DAA520",
    TokenClass.KEYWORD:         "#00CED1",
    TokenClass.UNCLASSIFIED:    COLORS["text"],
}

# ── Run-button look per verification status (glyph, colour) ──
STATUS_STYLE = {
    "idle":     ("▶", COLORS["text"]),
    "success":  ("✓", COLORS["green"]),
    "mismatch": ("?", COLORS["orange"]),
}

FONTS = {
    "code":      ("Iosevka", "Cascadia Code", "JetBrains Mono", "Consolas", "Courier New"),
    "code_size": 12,
    "ui":        "Segoe UI",
}


def color_for(token_class):
    """Colour for a token class. Only classes outside the vocabulary miss."""
    return THEME[token_class]


def theme_labels():
    """The theme as the host editor sees it: grammar label -> colour."""
    return {token_class.label: color for token_class, color in THEME.items()}


def _check_totality():
    for rules in (TOKEN_RULES, LEGACY_TOKEN_RULES):
        missing = produced_classes(rules) - THEME.keys()
        if missing:
            names = ", ".join(sorted(c.name for c in missing))
            raise ThemeError(f"No colour for token classes: {names}")


_check_totality()
