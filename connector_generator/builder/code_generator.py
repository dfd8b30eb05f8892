"""
Code Generator - Turns a discovered API configuration into source artifacts

Artifacts (each behind its generation flag):
- models/<model>.py + models/__init__.py   pydantic models
- <api>_api.py                             Protocol contract + httpx implementation
- <api>_client.py                          client wrapper
- <api>_registration.py                    options, auth and factories
- __init__.py                              package re-exports

No network access; the same configuration always yields the same files.
"""

import logging
from typing import Dict, List

from connector_generator.builder.client_template import render_client
from connector_generator.builder.contract_template import render_contract
from connector_generator.builder.model_template import (
    collect_models,
    model_module_name,
    render_model,
    render_models_package,
)
from connector_generator.builder.naming import safe_type_name, to_snake_case
from connector_generator.builder.operations import plan_operations
from connector_generator.builder.registration_template import render_package, render_registration
from connector_generator.schema.models import (
    ApiConfiguration,
    GeneratedFile,
    GeneratedFileType,
    GenerationResult,
    SchemaModel,
)

logger = logging.getLogger(__name__)


class CodeGenerator:
    """
    Generates client source files from an ApiConfiguration

    Usage:
    ```python
    result = CodeGenerator().generate(config)
    if result.is_success:
        FileWriter().write(result.generated_files, config.output_path)
    ```
    """

    def generate(self, config: ApiConfiguration) -> GenerationResult:
        """
        Generate every enabled artifact

        Returns:
            GenerationResult; any unexpected error yields a failed result
            with no files
        """
        try:
            files = self._generate_files(config)
        except Exception as e:
            logger.exception(f"Code generation failed for {config.api_name}")
            return GenerationResult(is_success=False, error_message=str(e))

        logger.info(f"Generated {len(files)} files for {config.api_name}")
        return GenerationResult(is_success=True, generated_files=files)

    def _generate_files(self, config: ApiConfiguration) -> List[GeneratedFile]:
        api_name = safe_type_name(config.api_name, fallback="MyApi")
        stem = to_snake_case(api_name)
        files: List[GeneratedFile] = []

        if config.generate_models and config.schemas:
            files.extend(self.generate_models(config))

        # Without models, operations fall back to untyped placeholders
        schemas: Dict[str, SchemaModel] = config.schemas if config.generate_models else {}
        operations = plan_operations(config.endpoints, schemas)

        if config.generate_contract and operations:
            files.append(GeneratedFile(
                file_name=f"{stem}_api.py",
                content=render_contract(api_name, config.base_url, operations),
                file_type=GeneratedFileType.CONTRACT,
            ))

            if config.generate_client:
                files.append(GeneratedFile(
                    file_name=f"{stem}_client.py",
                    content=render_client(api_name, stem, operations),
                    file_type=GeneratedFileType.CLIENT,
                ))

                if config.generate_registration:
                    files.append(GeneratedFile(
                        file_name=f"{stem}_registration.py",
                        content=render_registration(api_name, stem, config.base_url),
                        file_type=GeneratedFileType.REGISTRATION,
                    ))

        if files:
            file_types = {f.file_type for f in files}
            files.append(GeneratedFile(
                file_name="__init__.py",
                content=render_package(api_name, stem, file_types),
                file_type=GeneratedFileType.PACKAGE,
            ))

        return files

    def generate_models(self, config: ApiConfiguration) -> List[GeneratedFile]:
        """One file per distinct record type (nested ones included) plus models/__init__.py"""
        models = collect_models(list(config.schemas.values()))
        files = [
            GeneratedFile(
                file_name=f"{model_module_name(model)}.py",
                relative_path="models",
                content=render_model(
                    model,
                    frozen=config.use_frozen_models,
                    optional_types=config.use_optional_types,
                ),
                file_type=GeneratedFileType.MODEL,
            )
            for model in models
        ]

        files.append(GeneratedFile(
            file_name="__init__.py",
            relative_path="models",
            content=render_models_package(models),
            file_type=GeneratedFileType.PACKAGE,
        ))
        logger.debug(f"Rendered {len(models)} models")
        return files
