"""Read-only query surface over a completed matrix evaluation."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from sysmatrix.errors import UnknownOutputError, UnknownSystemError
from sysmatrix.matrix import MatrixResult
from sysmatrix.models import OutputDescriptor, OutputMap
from sysmatrix.systems import SystemId


@dataclass(frozen=True, slots=True)
class OutputRegistry:
    result: MatrixResult

    def get(self, system: str, output_name: str) -> OutputDescriptor:
        outputs = self._outputs(system)
        descriptor = outputs.get(output_name)
        if descriptor is None:
            raise UnknownOutputError(system, output_name, available=sorted(outputs))
        return descriptor

    def list_outputs(self, system: str) -> frozenset[str]:
        return frozenset(self._outputs(system))

    def systems(self) -> tuple[SystemId, ...]:
        return self.result.systems

    def items(self) -> Iterator[tuple[SystemId, str, OutputDescriptor]]:
        for system, outputs in self.result.items():
            for name in sorted(outputs):
                yield system, name, outputs[name]

    def attr_paths(self) -> dict[str, OutputDescriptor]:
        """Flattened ``"<output>.<system>"`` view, e.g. ``"devShell.x86_64-linux"``."""
        return {f"{name}.{system}": descriptor for system, name, descriptor in self.items()}

    def _outputs(self, system: str) -> OutputMap:
        outputs = self.result.get(SystemId(system))
        if outputs is None:
            raise UnknownSystemError(system, available=self.result.systems)
        return outputs


__all__ = ["OutputRegistry"]
