"""Modelos para invocações de shortcodes."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ShortcodeInvocation:
    """Diretiva inline encontrada no corpo do documento."""

    name: str
    args: tuple[str, ...] = ()
    kwargs: dict[str, str] = field(default_factory=dict)
    inner: str | None = None
    line: int = 1

    def arg(self, index: int, key: str | None = None) -> str | None:
        """Retorna argumento posicional (ou o nomeado equivalente)."""
        if key and key in self.kwargs:
            return self.kwargs[key]
        if index < len(self.args):
            return self.args[index]
        return None

    def __repr__(self) -> str:
        return f"<ShortcodeInvocation name={self.name} args={self.args} line={self.line}>"


@dataclass(frozen=True)
class LiteralSegment:
    """Trecho de texto copiado sem alterações."""

    text: str


@dataclass(frozen=True)
class ShortcodeSegment:
    """Trecho ocupado por um shortcode."""

    invocation: ShortcodeInvocation


Segment = LiteralSegment | ShortcodeSegment
