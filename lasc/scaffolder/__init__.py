"""lasc scaffolder -- generates a Go Lambda function project.

Quick usage::

    from lasc.config import ScaffoldConfig
    from lasc.scaffolder import ProjectGenerator

    generator = ProjectGenerator(ScaffoldConfig(root_dir="/tmp/my-func"))
    result = await generator.generate()
"""

from lasc.scaffolder.function_config import FunctionConfigMaterializer
from lasc.scaffolder.generator import ProjectGenerator, ScaffoldError, ScaffoldResult
from lasc.scaffolder.templates import TemplateRenderer

__all__ = [
    "FunctionConfigMaterializer",
    "ProjectGenerator",
    "ScaffoldError",
    "ScaffoldResult",
    "TemplateRenderer",
]
