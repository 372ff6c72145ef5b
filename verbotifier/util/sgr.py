# -----------------------------------------------------------------------------
# SGR (Select Graphic Rendition) escape sequences for console colors
# -----------------------------------------------------------------------------


class SGRSequence:
    def __init__(self, *params: int):
        self.params = params

    def __format__(self, format_spec: str) -> str:
        return str(self)

    def __str__(self):
        return '\033[' + ';'.join(map(str, self.params)) + 'm'


class SGRRegistry:
    FMT_RESET = SGRSequence(0)
    FMT_BOLD = SGRSequence(1)
    FMT_RED = SGRSequence(31)
    FMT_GREEN = SGRSequence(32)
    FMT_YELLOW = SGRSequence(33)
    FMT_BLUE = SGRSequence(34)
    FMT_CYAN = SGRSequence(36)
    FMT_GRAY = SGRSequence(37)
    FMT_HI_WHITE = SGRSequence(97)
