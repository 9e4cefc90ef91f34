"""
Constructor synthesis: name transforms, abstract Go declarations and the
allArgs / builder strategies.
"""

from gonstructor.synthesizer.constructors import (
    generate_all_args_constructor,
    generate_builder_constructor,
    synthesize,
)
from gonstructor.synthesizer.declarations import GeneratedArtifact

__all__ = [
    "GeneratedArtifact",
    "generate_all_args_constructor",
    "generate_builder_constructor",
    "synthesize",
]
