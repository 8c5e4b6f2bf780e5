from typing import Optional

from .base import LogEvent, LogParser
from .delimited import DelimitedParser
from .structured import StructuredParser


class LineParser(LogParser):
    """
    Classifies a raw line by its first character and decodes it.

    Lines starting with '{' are tried as compact JSON first. A JSON record
    that decodes is final: it is either an event or dropped. Anything that
    fails to decode goes to the pipe-delimited parser.
    """

    def __init__(self):
        super().__init__("line")
        self.structured = StructuredParser()
        self.delimited = DelimitedParser()

    def parse(self, line: str) -> Optional[LogEvent]:
        if self.structured.accepts(line):
            record = self.structured.decode(line)
            if record is not None:
                return self.structured.to_event(record)

        return self.delimited.parse(line)
