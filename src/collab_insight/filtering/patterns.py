"""Path and commit-message patterns used by the pre-filter.

All message patterns are matched against the stripped subject line with
``fullmatch`` and are case-insensitive unless noted.
"""

import re

# Lock files and wrapper artifacts, matched by basename
GENERATED_FILES = frozenset(
    {
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "Cargo.lock",
        "Gemfile.lock",
        "poetry.lock",
        "composer.lock",
        "go.sum",
        "Pipfile.lock",
        "gradle-wrapper.jar",
    }
)

# Build output and vendored directories, at any depth
GENERATED_PATH_PATTERNS = (
    re.compile(r"(^|.*/)node_modules/.*"),
    re.compile(r"(^|.*/)build/.*"),
    re.compile(r"(^|.*/)dist/.*"),
    re.compile(r"(^|.*/)target/.*"),
    re.compile(r"(^|.*/)out/.*"),
    re.compile(r"(^|.*/)\.gradle/.*"),
    re.compile(r"(^|.*/)vendor/.*"),
    re.compile(r"(^|.*/)__pycache__/.*"),
    re.compile(r".*\.min\.(js|css)"),
    re.compile(r".*\.generated\.[a-z]+"),
    re.compile(r".*\.g\.dart"),
    re.compile(r".*\.freezed\.dart"),
)

MERGE_PATTERNS = (
    re.compile(r"Merge (branch|pull request|remote-tracking).*", re.IGNORECASE),
    re.compile(r"Merge '.*' into .*", re.IGNORECASE),
    re.compile(r"Merged .*", re.IGNORECASE),
)

REVERT_PATTERNS = (
    re.compile(r"Revert .*", re.IGNORECASE),
    re.compile(r"This reverts commit.*", re.IGNORECASE),
)

TRIVIAL_MESSAGE_PATTERNS = (
    # Linting and formatting
    re.compile(r"(fix|run|apply|format).*lint(ing)?.*", re.IGNORECASE),
    re.compile(r"lint(ing)?\s*(fix(es)?)?\s*", re.IGNORECASE),
    re.compile(r"(apply|run)\s+(prettier|eslint|checkstyle|spotless|black|ruff).*", re.IGNORECASE),
    re.compile(r"format(ting)?\s*(code|files)?\s*", re.IGNORECASE),
    re.compile(r"code\s*format(ting)?.*", re.IGNORECASE),
    re.compile(r"(fix|apply)\s+format(ting)?.*", re.IGNORECASE),
    re.compile(r"(prettier|checkstyle|spotless).*", re.IGNORECASE),
    re.compile(r"eslint.*fix.*", re.IGNORECASE),
    # Whitespace and style
    re.compile(r"(fix|remove)\s*(trailing)?\s*whitespace.*", re.IGNORECASE),
    re.compile(r"whitespace.*", re.IGNORECASE),
    re.compile(r"(fix|update)\s+indentation.*", re.IGNORECASE),
    re.compile(r"style:\s*.*", re.IGNORECASE),
    # Typos
    re.compile(r"(fix|correct)\s*(a)?\s*typo(s)?.*", re.IGNORECASE),
    re.compile(r"typo(s)?\s*(fix)?\s*", re.IGNORECASE),
    # Work in progress and placeholders
    re.compile(r"wip:?(\s+.*)?", re.IGNORECASE),
    re.compile(r"(temp|tmp|test|testing)\s*", re.IGNORECASE),
    re.compile(r"\.{1,3}\s*"),
    re.compile(r"(oops|hmm|idk|stuff|changes|update|fix)\s*", re.IGNORECASE),
    # Automation
    re.compile(r"auto-?format.*", re.IGNORECASE),
    re.compile(r"(update|bump)\s+dependencies.*", re.IGNORECASE),
    re.compile(r"\[bot\].*", re.IGNORECASE),
    re.compile(r"chore\(deps\).*", re.IGNORECASE),
    # Initial commits
    re.compile(r"(initial|first) commit\s*", re.IGNORECASE),
    re.compile(r"init\s*", re.IGNORECASE),
)

FORMAT_MESSAGE_PATTERNS = (
    re.compile(r"(apply|run)\s+(code\s*)?(format|formatter|formatting).*", re.IGNORECASE),
    re.compile(r"reformat(ted)?(\s+.*)?", re.IGNORECASE),
    re.compile(r"(run|apply)\s+(black|autopep8|gofmt|rustfmt|clang-format|prettier).*", re.IGNORECASE),
    re.compile(r"(code|style)\s*cleanup.*", re.IGNORECASE),
    re.compile(r"normalize\s+(line\s*endings|whitespace|imports).*", re.IGNORECASE),
    re.compile(r"(organize|sort)\s+imports.*", re.IGNORECASE),
    re.compile(r"format(ting)?(\s+.*)?", re.IGNORECASE),
    re.compile(r"fix\s+(all\s*)?lint(er)?\s*(errors|warnings|issues)?\s*", re.IGNORECASE),
)

RENAME_MESSAGE_RE = re.compile(r"\b(rename[ds]?|move[ds]?)\b", re.IGNORECASE)

# Bot accounts, matched against author email and name
BOT_AUTHOR_RE = re.compile(r"\[bot\]|dependabot|renovate", re.IGNORECASE)


def first_match(patterns, text: str):
    """Return the first pattern that fully matches ``text``, or None."""
    text = text.strip()
    if not text:
        return None
    for pattern in patterns:
        if pattern.fullmatch(text):
            return pattern
    return None


def is_generated_path(path: str) -> bool:
    basename = path.rsplit("/", 1)[-1]
    if basename in GENERATED_FILES:
        return True
    return any(p.fullmatch(path) for p in GENERATED_PATH_PATTERNS)
