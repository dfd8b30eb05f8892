"""
Connector Pipeline - Runs discovery, inference and generation in sequence

Stages:
1. Connectivity probe (logged, not fatal)
2. Endpoint discovery
3. Schema inference from sampled GET responses
4. Code generation and file output

One HTTP session is created per run and closed when the run ends.
"""

import logging
from pathlib import Path
from typing import Optional

from connector_generator.builder.code_generator import CodeGenerator
from connector_generator.builder.naming import extract_api_name, to_snake_case
from connector_generator.config import GeneratorSettings
from connector_generator.exporter.file_writer import FileWriter
from connector_generator.introspection.connectivity_prober import ConnectivityProber
from connector_generator.introspection.endpoint_discoverer import EndpointDiscoverer
from connector_generator.introspection.http_session import create_session
from connector_generator.introspection.schema_inferencer import SchemaInferencer
from connector_generator.schema.models import ApiConfiguration, PipelineReport

logger = logging.getLogger(__name__)


class ConnectorPipeline:
    """
    Generates a client connector for the API behind a base URL

    Usage:
    ```python
    config = ApiConfiguration(base_url="https://jsonplaceholder.typicode.com")
    report = ConnectorPipeline().run(config)
    print(f"{report.files_written} files in {report.output_path}")
    ```
    """

    def __init__(
        self,
        settings: Optional[GeneratorSettings] = None,
        generator: Optional[CodeGenerator] = None,
        writer: Optional[FileWriter] = None,
    ):
        self.settings = settings or GeneratorSettings()
        self.generator = generator or CodeGenerator()
        self.writer = writer or FileWriter()

    def run(self, config: ApiConfiguration, write_report: bool = False) -> PipelineReport:
        """
        Run every stage against config, mutating it along the way

        Raises:
            ValueError: config has no base URL
            RuntimeError: code generation failed (nothing is written)
        """
        self.prepare(config)
        report = PipelineReport(output_path=config.output_path)

        session = create_session(config, self.settings)
        try:
            report.connectivity = ConnectivityProber(session, self.settings.timeout).test_connectivity(
                config.base_url
            )
            if report.connectivity.is_success:
                logger.info(f"Connected to {config.base_url} ({report.connectivity.status_code})")
            else:
                logger.warning(f"Cannot reach {config.base_url}: {report.connectivity.error_message}")

            discoverer = EndpointDiscoverer(session, self.settings.timeout)
            config.endpoints = discoverer.discover(config)
            report.endpoints_found = len(config.endpoints)

            inferencer = SchemaInferencer(session, self.settings.timeout, self.settings.max_samples)
            for model in inferencer.infer(config):
                # Schemas supplied up front keep their name
                config.schemas.setdefault(model.name, model)
            report.schemas_inferred = len(config.schemas)
        finally:
            session.close()

        result = self.generator.generate(config)
        if not result.is_success:
            raise RuntimeError(f"Code generation failed: {result.error_message}")

        written = self.writer.write(result.generated_files, config.output_path)
        report.files_written = len(written)
        if write_report:
            self.writer.write_report(config, config.output_path)

        logger.info(
            f"Pipeline finished: {report.endpoints_found} endpoints, "
            f"{report.schemas_inferred} schemas, {report.files_written} files"
        )
        return report

    def prepare(self, config: ApiConfiguration) -> ApiConfiguration:
        """Validate the configuration and fill name/path defaults."""
        if not config.base_url or not config.base_url.strip():
            raise ValueError("Base URL is required")

        config.base_url = config.base_url.strip()
        if not config.api_name:
            config.api_name = extract_api_name(config.base_url)
        if not config.package_name:
            config.package_name = f"{to_snake_case(config.api_name)}_client"
        if not config.output_path:
            config.output_path = str(Path(self.settings.output_dir) / config.package_name)

        return config
