"""
Template tools - MCP tools for template discovery, validation, registration
and export.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chuk_mcp_harmony.constants import (
    EXPORT_FORMATS,
    TEMPLATE_ID_PATTERN,
    ErrorMessages,
    SuccessMessages,
)
from chuk_mcp_harmony.templates import (
    TemplateLoader,
    TemplateLoadError,
    TemplateRegistry,
    TemplateValidationError,
    compile_template,
    validate_template,
)

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_template_tools(
    mcp: ChukMCPServer,
    registry: TemplateRegistry,
    templates_dir: Path | None = None,
    output_dir: Path | None = None,
) -> dict[str, Any]:
    """
    Register template tools with the MCP server.

    Args:
        mcp: The MCP server instance
        registry: The template registry
        templates_dir: Project template directory that persisted templates go to
        output_dir: Directory exported template files are written to

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}
    loader = TemplateLoader()

    @mcp.tool  # type: ignore[arg-type]
    async def music_list_templates() -> str:
        """
        List registered section templates.

        Returns:
            JSON string with list of template summaries

        Example:
            music_list_templates()
        """
        try:
            summaries = registry.summaries()

            return json.dumps(
                {
                    "status": "success",
                    "templates": [summary.model_dump() for summary in summaries],
                    "count": len(summaries),
                }
            )
        except Exception as e:
            logger.exception("Failed to list templates")
            return json.dumps({"status": "error", "message": str(e)})

    tools["music_list_templates"] = music_list_templates

    @mcp.tool  # type: ignore[arg-type]
    async def music_describe_template(template_id: str) -> str:
        """
        Get detailed information about a template.

        Returns phrases, the tension curve, reharm zones and the bars
        where cadences are expected.

        Args:
            template_id: Template identifier (e.g., 'jazz_aaba_v1')

        Returns:
            JSON string with template details

        Example:
            music_describe_template(template_id="blues_12bar_v1")
        """
        try:
            template = registry.get(template_id)
            if template is None:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.TEMPLATE_NOT_FOUND.format(
                            template_id=template_id
                        ),
                    }
                )

            grid = compile_template(template)

            return json.dumps(
                {
                    "status": "success",
                    "template": loader.to_dict(template),
                    "cadences": [
                        {
                            "bar_index": rule.bar_index,
                            "phrase": rule.phrase_name,
                            "cadence": rule.cadence_expectation.value,
                        }
                        for rule in grid.phrase_ends()
                    ],
                }
            )
        except Exception as e:
            logger.exception("Failed to describe template")
            return json.dumps({"status": "error", "message": str(e)})

    tools["music_describe_template"] = music_describe_template

    @mcp.tool  # type: ignore[arg-type]
    async def music_validate_template(content: str) -> str:
        """
        Validate a template document without registering it.

        Reports every issue found, in check order.

        Args:
            content: Template as YAML or JSON text

        Returns:
            JSON string with validation results

        Example:
            music_validate_template(content="id: my_tune\\nbars: 8\\n...")
        """
        try:
            template = loader.load_string(content)
            result = validate_template(template)

            return json.dumps(
                {
                    "status": "success",
                    "template_id": template.id,
                    "valid": result.is_valid,
                    "issues": [
                        {
                            "code": issue.code,
                            "message": issue.message,
                            "location": issue.location,
                        }
                        for issue in result.issues
                    ],
                }
            )
        except TemplateLoadError as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to validate template")
            return json.dumps({"status": "error", "message": str(e)})

    tools["music_validate_template"] = music_validate_template

    @mcp.tool  # type: ignore[arg-type]
    async def music_register_template(
        content: str, persist: bool = False, force: bool = False
    ) -> str:
        """
        Register a template, replacing any template with the same id.

        The template is validated first. Replacing a template discards the
        previous version. With persist, the template is also written to the
        project template directory as ``<id>.yaml`` so it is loaded again on
        the next start; an existing file is only overwritten with force.

        Args:
            content: Template as YAML or JSON text
            persist: Also save the template to the project template directory
            force: Overwrite an existing template file when persisting

        Returns:
            JSON string with the registered id, any replaced version and,
            when persisted, the path written

        Example:
            music_register_template(content="id: jazz_aaba_v1\\nversion: 2\\n...", persist=True)
        """
        try:
            template = loader.load_string(content)

            path: Path | None = None
            if persist:
                if templates_dir is None:
                    return json.dumps(
                        {"status": "error", "message": ErrorMessages.NO_TEMPLATES_DIR}
                    )
                path = templates_dir / f"{template.id}.yaml"
                if path.exists() and not force:
                    return json.dumps(
                        {
                            "status": "error",
                            "message": ErrorMessages.TEMPLATE_FILE_EXISTS.format(path=path),
                        }
                    )

            previous = registry.register(template)
            if path is not None:
                loader.dump(template, path)
                logger.info("Saved template '%s' to %s", template.id, path)

            response: dict[str, Any] = {
                "status": "success",
                "message": SuccessMessages.TEMPLATE_REGISTERED.format(
                    template_id=template.id, version=template.version
                ),
                "template_id": template.id,
                "version": template.version,
                "replaced_version": previous.version if previous is not None else None,
            }
            if path is not None:
                response["path"] = str(path)
            return json.dumps(response)
        except TemplateValidationError as e:
            return json.dumps(
                {
                    "status": "error",
                    "message": str(e),
                    "kind": e.kind.value,
                    "issues": [str(issue) for issue in e.issues],
                }
            )
        except TemplateLoadError as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to register template")
            return json.dumps({"status": "error", "message": str(e)})

    tools["music_register_template"] = music_register_template

    @mcp.tool  # type: ignore[arg-type]
    async def music_export_template(
        template_id: str,
        format: str = "yaml",
        output_name: str | None = None,
        overwrite: bool = False,
    ) -> str:
        """
        Export a registered template as YAML or JSON.

        The document is always returned inline. With output_name it is also
        written to the output directory as ``<output_name>.<format>``.

        Args:
            template_id: Template identifier (e.g., 'jazz_aaba_v1')
            format: 'yaml' or 'json'
            output_name: Optional file name (without extension) to write
            overwrite: Replace an existing output file

        Returns:
            JSON string with the exported document and any path written

        Example:
            music_export_template(template_id="blues_12bar_v1", format="json")
        """
        try:
            template = registry.get(template_id)
            if template is None:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.TEMPLATE_NOT_FOUND.format(
                            template_id=template_id
                        ),
                    }
                )

            export_format = format.strip().lower()
            if export_format not in EXPORT_FORMATS:
                return json.dumps(
                    {
                        "status": "error",
                        "message": ErrorMessages.INVALID_EXPORT_FORMAT.format(format=format),
                    }
                )

            content = loader.dumps(template, export_format)
            response: dict[str, Any] = {
                "status": "success",
                "message": SuccessMessages.TEMPLATE_EXPORTED.format(
                    template_id=template.id, format=export_format
                ),
                "template_id": template.id,
                "version": template.version,
                "format": export_format,
                export_format: content,
            }

            if output_name is not None:
                if output_dir is None:
                    return json.dumps({"status": "error", "message": ErrorMessages.NO_OUTPUT_DIR})
                if not re.fullmatch(TEMPLATE_ID_PATTERN, output_name):
                    return json.dumps(
                        {
                            "status": "error",
                            "message": ErrorMessages.INVALID_OUTPUT_NAME.format(name=output_name),
                        }
                    )

                path = output_dir / f"{output_name}.{export_format}"
                if path.exists() and not overwrite:
                    return json.dumps(
                        {
                            "status": "error",
                            "message": ErrorMessages.OUTPUT_FILE_EXISTS.format(path=path),
                        }
                    )

                output_dir.mkdir(parents=True, exist_ok=True)
                path.write_text(content, encoding="utf-8")
                response["path"] = str(path)

            return json.dumps(response)
        except Exception as e:
            logger.exception("Failed to export template")
            return json.dumps({"status": "error", "message": str(e)})

    tools["music_export_template"] = music_export_template

    return tools
