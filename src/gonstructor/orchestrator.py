"""
Generation orchestrator.

Coordinates one invocation:
1. Resolving the package from the input patterns
2. Parsing its files (through a per-invocation parse cache)
3. Extracting the target struct
4. Synthesizing the requested constructors
5. Composing, emitting and writing the generated file

Any failure aborts the run before anything is written.
"""

import logging
from pathlib import Path

from gonstructor.analyzer.field_extractor import extract_type_declaration
from gonstructor.analyzer.package_loader import PackageLoader
from gonstructor.analyzer.parse_cache import ParseCache
from gonstructor.config.models import GeneratorConfig
from gonstructor.emitter.composer import build_banner, compose
from gonstructor.emitter.go_emitter import GoEmitter
from gonstructor.emitter.output import resolve_output_path, write_generated_file
from gonstructor.languages.base.plugin import LanguagePlugin
from gonstructor.languages.go.plugin import GoPlugin
from gonstructor.synthesizer.constructors import synthesize

logger = logging.getLogger(__name__)


class GonstructorOrchestrator:
    """Runs the analysis and synthesis pipeline for one struct."""

    def __init__(self, config: GeneratorConfig, plugin: LanguagePlugin | None = None):
        self.config = config
        self.plugin = plugin or GoPlugin()
        self.cache = ParseCache(self.plugin)
        self.loader = PackageLoader(self.cache)
        self.emitter = GoEmitter(
            self.plugin,
            formatter=config.formatter,
            timeout=config.formatter_timeout,
        )

    def generate(self) -> str:
        """
        Produce the generated source text without touching the filesystem.

        Returns:
            The emitted Go source
        """
        cfg = self.config

        # Step 1: Resolve package
        package = self.loader.load(cfg.patterns)
        logger.info(f"Package {package.name}: {len(package.files)} files")

        # Step 2: Parse files (already cached by the loader)
        parsed_files = self.cache.parse_all(package.files)

        # Step 3: Extract struct
        type_decl = extract_type_declaration(
            cfg.type_name, parsed_files, self.plugin, tag_key=cfg.tag_key
        )
        logger.info(
            f"Struct {type_decl.name}: {len(type_decl.fields)} fields, "
            f"{len(type_decl.fields) - len(type_decl.included_fields)} skipped"
        )

        # Step 4: Synthesize
        artifacts = [synthesize(type_decl, kind) for kind in cfg.constructor_types]

        # Step 5: Compose and emit
        unit = compose(
            build_banner(cfg.invocation_args),
            package.name,
            artifacts,
            imports=type_decl.imports,
        )
        return self.emitter.emit(unit)

    def run(self) -> Path:
        """
        Generate and write the constructor file.

        Returns:
            Path of the written file
        """
        code = self.generate()

        output_path = resolve_output_path(
            self.config.output,
            self.config.patterns,
            self.config.type_name,
            suffix=self.config.generated_suffix,
        )
        write_generated_file(output_path, code)
        logger.info(f"Generated {output_path}")
        return output_path


def run_generation(config: GeneratorConfig) -> Path:
    """Convenience function to run a full generation."""
    return GonstructorOrchestrator(config).run()
