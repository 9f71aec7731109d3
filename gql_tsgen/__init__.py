"""GraphQL to TypeScript (zod) code generator."""

__version__ = "0.1.0"
