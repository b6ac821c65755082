"""
BlockPipe Tour — Desktop Interface
CustomTkinter + Tkinter hybrid window: one editor pair per tutorial
section with live syntax highlighting and a run/verify button.
"""
import logging
import tkinter as tk
from tkinter import font as tkfont

import customtkinter as ctk

from highlighting import REGISTRY, LANGUAGE_ID
from theme import COLORS, FONTS, STATUS_STYLE
from verification import VerificationSession

logger = logging.getLogger(__name__)

ctk.set_appearance_mode("dark")

HIGHLIGHT_DELAY_MS = 80

AUTO_CLOSING_PAIRS = {
    "(": ")",
    "{": "}",
    "[": "]",
    '"': '"',
}
CLOSING_CHARS = frozenset(AUTO_CLOSING_PAIRS.values())

# Tcl 8.6 indexes text in UTF-16 units: characters outside the BMP span two columns.
WIDE_INDEX_CHARS = tk.TkVersion < 8.7


def closing_pair(char):
    """Closing character inserted after an opening one, or None."""
    return AUTO_CLOSING_PAIRS.get(char)


def auto_close_edit(char, next_char="", selected=""):
    """Edit for a typed character as (text, cursor_shift), or None for a plain keypress.

    text replaces the selection (if any) at the cursor; cursor_shift then
    moves the cursor relative to the end of the inserted text.
    """
    if not char:
        return None
    if not selected and char in CLOSING_CHARS and next_char == char:
        return "", 1
    closer = closing_pair(char)
    if closer is None:
        return None
    if selected:
        return char + selected + closer, 0
    return char + closer, -1


def index_width(text, wide=WIDE_INDEX_CHARS):
    """Number of Tk index columns text occupies."""
    if not wide:
        return len(text)
    return len(text) + sum(1 for ch in text if ord(ch) > 0xFFFF)


def token_span(token, lines, wide=WIDE_INDEX_CHARS):
    """Tk "line.column" indices of a token's start and end.

    lines is the source split on "\\n"; token.line and token.column are
    1-based code-point positions from the lexer.
    """
    start_col = index_width(lines[token.line - 1][:token.column - 1], wide)
    parts = token.value.split("\n")
    if len(parts) == 1:
        end = f"{token.line}.{start_col + index_width(token.value, wide)}"
    else:
        end = f"{token.line + len(parts) - 1}.{index_width(parts[-1], wide)}"
    return f"{token.line}.{start_col}", end


def pick_code_font(size=FONTS["code_size"]):
    families = tkfont.families()
    for fam in FONTS["code"]:
        if fam in families:
            return tkfont.Font(family=fam, size=size)
    return tkfont.Font(family="Courier", size=size)


# ═══════════════════════════════════════════════════════
#  Core Editor Widgets  (pure Tk, tag-based highlighting)
# ═══════════════════════════════════════════════════════

class CodeEditor(tk.Text):
    """Text widget highlighted by a registered language."""

    def __init__(self, parent, language_id=LANGUAGE_ID, registry=REGISTRY, **kwargs):
        super().__init__(parent, **kwargs)
        self.language_id = language_id
        self.registry = registry
        self._highlight_job = None
        self._setup_tags()
        self.bind("<<Modified>>", self._on_modify)
        self.bind("<KeyPress>", self._on_key)

    def _setup_tags(self):
        for label, color in self.registry.theme_for(self.language_id).items():
            self.tag_configure(label, foreground=color)

    def _on_key(self, event):
        selected = self.get("sel.first", "sel.last") if self.tag_ranges("sel") else ""
        edit = auto_close_edit(event.char, self.get("insert"), selected)
        if edit is None:
            return None
        text, shift = edit
        if selected:
            self.delete("sel.first", "sel.last")
        self.insert("insert", text)
        self.mark_set("insert", f"insert{shift:+d}c")
        return "break"

    # ── Syntax highlighting (debounced) ──

    def _on_modify(self, _event=None):
        if self.edit_modified():
            if self._highlight_job:
                self.after_cancel(self._highlight_job)
            self._highlight_job = self.after(HIGHLIGHT_DELAY_MS, self.highlight_syntax)
            self.edit_modified(False)
            self.event_generate("<<ContentChanged>>")

    def get_source(self):
        return self.get("1.0", "end-1c")

    def set_source(self, source):
        self.delete("1.0", "end")
        self.insert("1.0", source)
        self.edit_modified(False)
        self.highlight_syntax()

    def highlight_syntax(self):
        """Re-tokenize the whole buffer and re-apply token tags."""
        self._highlight_job = None
        for label in self.registry.theme_for(self.language_id):
            self.tag_remove(label, "1.0", "end")
        source = self.get_source()
        lines = source.split("\n")
        for tok in self.registry.tokenize(self.language_id, source):
            self.tag_add(tok.type.label, *token_span(tok, lines))


class OutputPanel(tk.Text):
    """Read-only output pane."""

    def __init__(self, parent, **kwargs):
        super().__init__(parent, **kwargs)
        self.configure(state="disabled")

    def show(self, text):
        self.configure(state="normal")
        self.delete("1.0", "end")
        self.insert("1.0", text)
        self.configure(state="disabled")


# ═══════════════════════════════════════════════════════
#  Tutorial Section
# ═══════════════════════════════════════════════════════

class SectionWidget(ctk.CTkFrame):
    """Title, narrative and the verify-able editor pair of one section."""

    def __init__(self, parent, session: VerificationSession, code_font, **kwargs):
        super().__init__(parent, fg_color=COLORS["bg"], corner_radius=0, **kwargs)
        self.session = session
        self.code_font = code_font
        self._build_ui()
        self._render()

    def _build_ui(self):
        section = self.session.section

        ctk.CTkFrame(self, fg_color=COLORS["border"], height=2,
                     corner_radius=0).pack(fill="x", pady=(20, 12))
        ctk.CTkLabel(
            self, text=section.title, font=(FONTS["ui"], 18, "bold"),
            text_color=COLORS["text"], anchor="w",
        ).pack(fill="x")
        ctk.CTkLabel(
            self, text=section.narrative, font=(FONTS["ui"], 12),
            text_color=COLORS["subtext"], anchor="w", justify="left",
            wraplength=760,
        ).pack(fill="x", pady=(4, 0))

        row = ctk.CTkFrame(self, fg_color="transparent")
        row.pack(fill="x", pady=20)

        self.run_btn = ctk.CTkButton(
            row, text="", command=self.run, width=40, height=40,
            corner_radius=8, font=(FONTS["ui"], 16, "bold"),
            fg_color=COLORS["surface"], hover_color=COLORS["overlay"],
        )
        self.run_btn.pack(side="left", padx=(0, 12))

        editors = tk.Frame(row, bg=COLORS["bg"])
        editors.pack(side="left", fill="both", expand=True)

        self.editor = CodeEditor(
            editors, font=self.code_font, height=8,
            bg=COLORS["bg_secondary"], fg=COLORS["text"],
            insertbackground=COLORS["cursor"], insertwidth=2,
            selectbackground=COLORS["selection"], selectforeground=COLORS["text"],
            relief="flat", bd=0, padx=8, pady=8, wrap="none", undo=True,
        )
        self.editor.pack(fill="x")
        self.editor.set_source(self.session.state.current_source)
        self.editor.bind("<<ContentChanged>>", self._on_editor_change)

        self.output = OutputPanel(
            editors, font=self.code_font, height=2,
            bg=COLORS["output_bg"], fg=COLORS["text"],
            relief="flat", bd=0, padx=8, pady=6, wrap="word",
        )
        self.output.pack(fill="x", pady=(8, 0))

    def _on_editor_change(self, _event=None):
        self.session.edit(self.editor.get_source())

    def run(self):
        self.session.edit(self.editor.get_source())
        self.session.run()
        self._render()

    def _render(self):
        glyph, color = STATUS_STYLE[self.session.status.value]
        self.run_btn.configure(text=glyph, text_color=color)
        self.output.show(self.session.output_text)


# ═══════════════════════════════════════════════════════
#  Main Window
# ═══════════════════════════════════════════════════════

class TourWindow:
    """Scrollable tour: header, one SectionWidget per section, closing note."""

    def __init__(self, sections, bridge):
        self.root = ctk.CTk()
        self.root.title("An Interactive Tour of BlockPipe")
        self.root.configure(fg_color=COLORS["bg_tertiary"])
        self.root.geometry("960x800")
        self.root.minsize(640, 480)

        self.code_font = pick_code_font()
        self.sessions = [VerificationSession(section, bridge) for section in sections]
        self.section_widgets = []

        self._build_ui()

    def _build_ui(self):
        ctk.CTkFrame(self.root, fg_color=COLORS["accent"],
                     corner_radius=0, height=2).pack(fill="x", side="top")

        body = ctk.CTkScrollableFrame(
            self.root, fg_color=COLORS["bg"], corner_radius=0,
            scrollbar_button_color=COLORS["surface"],
            scrollbar_button_hover_color=COLORS["overlay"],
        )
        body.pack(fill="both", expand=True)

        self._build_header(body)
        for session in self.sessions:
            widget = SectionWidget(body, session, self.code_font)
            widget.pack(fill="x", padx=32)
            self.section_widgets.append(widget)
        self._build_footer(body)

    def _build_header(self, parent):
        header = ctk.CTkFrame(parent, fg_color="transparent")
        header.pack(fill="x", padx=32, pady=(40, 10))
        ctk.CTkLabel(
            header, text="()|{}", font=(FONTS["ui"], 32, "bold"),
            text_color=COLORS["accent"],
        ).pack(side="left", padx=(0, 20))
        titles = ctk.CTkFrame(header, fg_color="transparent")
        titles.pack(side="left")
        ctk.CTkLabel(
            titles, text="An Interactive Tour of BlockPipe",
            font=(FONTS["ui"], 20, "bold"), text_color=COLORS["text"], anchor="w",
        ).pack(fill="x")
        ctk.CTkLabel(
            titles, text="A functional language built around the pipe operator",
            font=(FONTS["ui"], 13), text_color=COLORS["subtext"], anchor="w",
        ).pack(fill="x")

    def _build_footer(self, parent):
        ctk.CTkFrame(parent, fg_color=COLORS["border"], height=2,
                     corner_radius=0).pack(fill="x", padx=32, pady=(20, 12))
        ctk.CTkLabel(
            parent,
            text="You made it! That was a whirlwind tour of BlockPipe.",
            font=(FONTS["ui"], 14, "bold"), text_color=COLORS["text"], anchor="w",
        ).pack(fill="x", padx=32, pady=(0, 40))

    def start(self):
        logger.info(f"Showing {len(self.sessions)} tutorial sections")
        self.root.mainloop()
