from typing import TextIO


class Stanza(dict[str, str]):
    """One RFC822-style control paragraph.

    Fields are serialized in insertion order. A value that starts with a
    newline is a multi-line block: its continuation lines must already be
    indented by one space (e.g. the checksum lists of a Release file).
    """

    def dump(self) -> str:
        lines = []
        for field, value in self.items():
            if not value or value.startswith("\n"):
                lines.append(f"{field}:{value}")
            else:
                lines.append(f"{field}: {value}")
        return "\n".join(lines) + "\n"

    def write_to(self, stream: TextIO) -> None:
        """Write the paragraph followed by the blank line that terminates it."""
        stream.write(self.dump())
        stream.write("\n")

    def copy(self) -> "Stanza":
        return Stanza(self)
