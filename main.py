import logging
import sys

from highlighting import ensure_registered
from interpreter_bridge import SubprocessInterpreter, DEFAULT_EXECUTABLE
from lexer import TOKEN_RULES, LEGACY_TOKEN_RULES
from tutorial_content import load_sections, TutorialContentError, DEFAULT_CONTENT_PATH

logger = logging.getLogger("blockpipe_tour")

USAGE = "Usage: python main.py [tutorial.yml] [--interpreter PATH] [--legacy-lexer] [--verbose]"


def parse_args(argv):
    options = {
        "content": DEFAULT_CONTENT_PATH,
        "interpreter": DEFAULT_EXECUTABLE,
        "legacy_lexer": False,
        "verbose": False,
    }
    i = 0
    while i < len(argv):
        arg = argv[i]
        if arg == '--interpreter' and i + 1 < len(argv):
            i += 1
            options["interpreter"] = argv[i]
        elif arg == '--legacy-lexer':
            options["legacy_lexer"] = True
        elif arg == '--verbose':
            options["verbose"] = True
        elif arg.startswith('--'):
            raise ValueError(f"Unknown option: {arg}")
        else:
            options["content"] = arg
        i += 1
    return options


def run(options):
    logging.basicConfig(
        level=logging.DEBUG if options["verbose"] else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    ensure_registered(rules=LEGACY_TOKEN_RULES if options["legacy_lexer"] else TOKEN_RULES)

    try:
        sections = load_sections(options["content"])
    except TutorialContentError as e:
        logger.error(f"Cannot start the tour: {e}")
        return 1

    from tutorial_widget import TourWindow

    app = TourWindow(sections, SubprocessInterpreter(options["interpreter"]))
    app.start()
    return 0


def main():
    try:
        opts = parse_args(sys.argv[1:])
    except ValueError as e:
        print(e)
        print(USAGE)
        sys.exit(2)
    sys.exit(run(opts))


if __name__ == "__main__":
    main()
