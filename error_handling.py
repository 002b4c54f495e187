"""
Parse error records and reporting for Monkey
Structured errors with source context, rendered for the shell
"""

from typing import Dict, List, Optional


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Parse error at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got'] is not None:
        error_msg += f"  Got: {error['got'] or 'end of input'}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += "  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        context_parts.append(f"{line_prefix}{lines[i]}")
        if i == line_num - 1:
            context_parts.append(f"{'':6}{' ' * max(col_num - 1, 0)}^ Error here")

    return '\n'.join(context_parts)


def generate_suggestions(expected: List[str], got: Optional[str]) -> List[str]:
    """Generate helpful suggestions based on the error"""
    suggestions = []

    if ")" in expected:
        suggestions.append("Check for a missing closing parenthesis")

    if "]" in expected:
        suggestions.append("Check for a missing closing bracket")

    if "}" in expected:
        suggestions.append("Check for a missing closing brace")

    if "IDENT" in expected and got in ("fn", "let", "if", "else", "true", "false", "return"):
        suggestions.append(f"'{got}' is a keyword and cannot be used as a name")

    if "=" in expected and got == "==":
        suggestions.append("Bindings use a single '=': let x = 5;")

    if got == "":
        suggestions.append("The input ended early; the last expression is incomplete")

    return suggestions


def with_source_context(error: Dict, source_text: str) -> Dict:
    """Return a copy of the error enriched with context lines and suggestions"""
    return {
        **error,
        'context': get_context_lines(source_text, error['line'], error['column']),
        'suggestions': error['suggestions'] or generate_suggestions(error['expected'], error['got'])
    }


# ============================================================================
# EXCEPTION FOR HOST BOUNDARIES
# ============================================================================

class MonkeyParseError(Exception):
    """Raised by the shell when a program cannot be trusted because it failed to parse"""

    def __init__(self, errors: List[Dict], source_text: str = "", filename: str = "<input>"):
        self.errors = [with_source_context(e, source_text) for e in errors] if source_text else list(errors)
        self.filename = filename
        super().__init__(f"{len(self.errors)} parse error(s) in {filename}")

    @property
    def messages(self) -> List[str]:
        return [e['message'] for e in self.errors]

    def __str__(self) -> str:
        header = f"{len(self.errors)} parse error(s) in {self.filename}:\n"
        return header + "\n".join(format_parse_error(e) for e in self.errors)
