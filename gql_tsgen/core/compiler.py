"""End-to-end generation run.

Parses the operation documents, loads the schema and renders the schema and
operations modules:

    compiler = Compiler(load_config())
    written = compiler.run()
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from ..config import GeneratorConfig
from ..errors import DocumentErrors, GenerationError, GraphQLSyntaxError
from . import nodes
from .client_generator import ClientGenerator
from .generator import SchemaGenerator
from .hooks import AddHeaderHook, HookRunner
from .ir import Schema
from .loader import collect_graphql_files, load_schema
from .parser import Parser
from .scalars import ScalarRegistry

logger = logging.getLogger(__name__)


@dataclass
class OperationDocuments:
    """Executable definitions collected from the operation files."""
    operations: list[nodes.OperationDefinition] = field(default_factory=list)
    fragments: list[nodes.FragmentDefinition] = field(default_factory=list)

    def add(self, definition: nodes.Definition, source: str):
        if isinstance(definition, nodes.OperationDefinition):
            self.operations.append(definition)
        elif isinstance(definition, nodes.FragmentDefinition):
            self.fragments.append(definition)
        else:
            logger.warning(
                "Ignoring %s %s in operations file %s",
                type(definition).__name__,
                definition.name,
                source,
            )

    def check_names(self):
        """Operation and fragment names must be unique."""
        for kind, names in (
            ("operation", [op.function_name for op in self.operations]),
            ("fragment", [f.name for f in self.fragments]),
        ):
            seen = set()
            for name in names:
                if name in seen:
                    raise GenerationError(f"Duplicate {kind} name {name}")
                seen.add(name)


def parse_operation_files(files: list[Path]) -> OperationDocuments:
    """Parse every operation file, reporting all syntax errors together.

    Raises:
        DocumentErrors: If any file failed to parse.
    """
    documents = OperationDocuments()
    errors: list[tuple[str, GraphQLSyntaxError]] = []

    for file_path in files:
        logger.debug("Parsing %s", file_path)
        try:
            with Parser(file_path.read_text(encoding="utf-8")) as parser:
                definitions = list(parser)
        except GraphQLSyntaxError as e:
            errors.append((str(file_path), e))
            continue
        for definition in definitions:
            documents.add(definition, str(file_path))

    if errors:
        raise DocumentErrors(errors)

    documents.check_names()
    return documents


@dataclass
class GeneratedFile:
    filename: str
    content: str


class Compiler:
    """Runs the whole pipeline for one configuration.

    Args:
        config: Generator configuration
        hooks: Optional hook runner; it is copied, and a header hook is added
            to the copy when `generation.header` is set
        template_dir: Optional directory with custom Jinja2 templates
    """

    def __init__(
        self,
        config: GeneratorConfig,
        hooks: HookRunner | None = None,
        template_dir: str | None = None,
    ):
        self.config = config
        self.hooks = hooks.copy() if hooks is not None else HookRunner()
        self.template_dir = template_dir
        if config.generation.header:
            self.hooks.add(AddHeaderHook(config.generation.header))
        self.scalars = ScalarRegistry.from_config(
            {name: s.model_dump() for name, s in config.generation.scalars.items()}
        )

    def compile(
        self,
        schema: Schema | None = None,
        documents: OperationDocuments | None = None,
    ) -> list[GeneratedFile]:
        """Generate both modules in memory."""
        if documents is None:
            documents = parse_operation_files(
                collect_graphql_files(self.config.input.operations)
            )
        if schema is None:
            schema = load_schema(self.config)
        schema = self.hooks.run_pre_hooks(schema)

        logger.info(
            "Generating %d operations and %d fragments",
            len(documents.operations),
            len(documents.fragments),
        )

        schema_generator = SchemaGenerator(
            schema,
            documents.operations,
            documents.fragments,
            scalars=self.scalars,
            strict=self.config.generation.strict,
            template_dir=self.template_dir,
        )
        client_generator = ClientGenerator(
            documents.operations,
            documents.fragments,
            declared=schema_generator.declared_names(),
            scalars=self.scalars,
            suffix=self.config.output.suffix,
            template_dir=self.template_dir,
        )

        output = self.config.output
        files = [
            GeneratedFile(output.schema_filename, schema_generator.generate()),
            GeneratedFile(output.operations_filename, client_generator.generate()),
        ]
        return [
            GeneratedFile(f.filename, self.hooks.run_post_hooks(f.filename, f.content))
            for f in files
        ]

    def write(self, files: list[GeneratedFile]) -> list[Path]:
        """Write generated files into `output.location`."""
        location = Path(self.config.output.location)
        location.mkdir(parents=True, exist_ok=True)
        written = []
        for generated in files:
            path = location / generated.filename
            path.write_text(generated.content, encoding="utf-8")
            written.append(path)
        return written

    def run(self) -> list[Path]:
        """Compile and write; nothing is written if any step fails."""
        return self.write(self.compile())
