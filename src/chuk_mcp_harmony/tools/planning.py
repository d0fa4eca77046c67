"""
Planning tools - MCP tools for style discovery and section planning.

Tools for listing style profiles, inspecting their weights, saving project
profiles, and planning chords for a registered template.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_harmony.constants import (
    DEFAULT_KEY,
    DEFAULT_STYLE,
    ErrorMessages,
    SuccessMessages,
)
from chuk_mcp_harmony.core.key import Key
from chuk_mcp_harmony.planner import (
    DiatonicCandidateProvider,
    ExplainMode,
    PlanError,
    plan_section,
    render_text_report,
    summarize,
)
from chuk_mcp_harmony.styles import ProfileLoader, UnknownStyleError
from chuk_mcp_harmony.styles.profiles import is_builtin
from chuk_mcp_harmony.templates import (
    TemplateNotFoundError,
    TemplateRegistry,
    TemplateValidationError,
    compile_template,
    validate,
)

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_planning_tools(
    mcp: ChukMCPServer,
    registry: TemplateRegistry,
    profile_loader: ProfileLoader,
) -> dict[str, Any]:
    """
    Register style and planning tools with the MCP server.

    Args:
        mcp: The MCP server instance
        registry: The template registry
        profile_loader: The style profile loader

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def music_list_styles() -> str:
        """
        List available style profiles.

        Returns the built-in presets followed by any project profiles.

        Returns:
            JSON string with list of style summaries

        Example:
            music_list_styles()
        """
        try:
            profiles = profile_loader.list_profiles()

            return json.dumps(
                {
                    "status": "success",
                    "styles": [profile.model_dump() for profile in profiles],
                    "count": len(profiles),
                    "default": DEFAULT_STYLE,
                }
            )
        except Exception as e:
            logger.exception("Failed to list styles")
            return json.dumps({"status": "error", "message": str(e)})

    tools["music_list_styles"] = music_list_styles

    @mcp.tool  # type: ignore[arg-type]
    async def music_describe_style(name: str) -> str:
        """
        Get the cost weights of a style profile.

        Args:
            name: Style name (case-insensitive; '-' and '_' are interchangeable)

        Returns:
            JSON string with the profile's weights

        Example:
            music_describe_style(name="smooth-ballad")
        """
        try:
            profile = profile_loader.get_profile(name)

            return json.dumps(
                {
                    "status": "success",
                    "style": profile.to_yaml_dict(),
                    "builtin": is_builtin(profile.name),
                }
            )
        except UnknownStyleError as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to describe style")
            return json.dumps({"status": "error", "message": str(e)})

    tools["music_describe_style"] = music_describe_style

    @mcp.tool  # type: ignore[arg-type]
    async def music_save_style(
        name: str,
        base_style: str = DEFAULT_STYLE,
        overrides: dict[str, Any] | None = None,
        description: str = "",
    ) -> str:
        """
        Save a project style profile derived from an existing one.

        The new profile starts from base_style's weights with the overrides
        applied, and is written to the project styles directory. Built-in
        names are reserved.

        Args:
            name: Name for the new profile
            base_style: Profile to start from
            overrides: Weight overrides (e.g., {"tension_scale": 0.5, "beam_width": 4})
            description: Profile description

        Returns:
            JSON string with the saved weights and the path written

        Example:
            music_save_style(name="late_night", base_style="smooth_ballad",
                             overrides={"tension_scale": 0.5})
        """
        try:
            base = profile_loader.get_profile(base_style)
            profile = base.with_overrides(
                **{
                    **(overrides or {}),
                    "name": name,
                    "description": description or f"Derived from {base.name}",
                }
            )
            path = profile_loader.save_profile(profile)
            logger.info("Saved style '%s' to %s", profile.name, path)

            return json.dumps(
                {
                    "status": "success",
                    "message": SuccessMessages.STYLE_SAVED.format(name=profile.name, path=path),
                    "style": profile.to_yaml_dict(),
                    "path": str(path),
                }
            )
        except (UnknownStyleError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to save style")
            return json.dumps({"status": "error", "message": str(e)})

    tools["music_save_style"] = music_save_style

    @mcp.tool  # type: ignore[arg-type]
    async def music_plan_section(
        template_id: str,
        key: str = DEFAULT_KEY,
        style: str = DEFAULT_STYLE,
        beam_width: int | None = None,
        explain: str = "brief",
        overrides: dict[str, Any] | None = None,
        include_sevenths: bool = True,
    ) -> str:
        """
        Plan one chord per bar for a registered template.

        Chords are chosen from the diatonic chords of the key and priced by
        the style profile. With explanation on, the response carries a
        per-bar trace, summaries and a text report.

        Args:
            template_id: Template identifier (e.g., 'jazz_aaba_v1')
            key: Key like 'C_major', 'A_minor' or 'Bb major'
            style: Style profile name
            beam_width: Partial progressions kept per bar (style default if omitted)
            explain: Explain mode ('none', 'brief', 'detailed', 'debug')
            overrides: Optional style weight overrides (e.g., {"tension_scale": 2.0})
            include_sevenths: Offer seventh chords as well as triads

        Returns:
            JSON string with the planned progression

        Example:
            music_plan_section(template_id="blues_12bar_v1", key="F_major", style="gospel_drive")
        """
        try:
            template = registry.require(template_id)

            try:
                key_obj = Key.parse(key)
            except ValueError:
                return json.dumps(
                    {"status": "error", "message": ErrorMessages.INVALID_KEY.format(key=key)}
                )

            profile = profile_loader.get_profile(style)
            if overrides:
                profile = profile.with_overrides(**overrides)

            mode = ExplainMode.parse(explain)

            validate(template)
            grid = compile_template(template)
            result = plan_section(
                grid,
                profile,
                DiatonicCandidateProvider(key_obj, include_sevenths=include_sevenths),
                beam_width,
                explain=mode,
            )

            response: dict[str, Any] = {
                "status": "success",
                "message": SuccessMessages.SECTION_PLANNED.format(
                    bars=len(result.chords), template_id=template.id
                ),
                "key": str(key_obj),
                "style": profile.name,
                "plan": result.to_dict(),
            }
            if mode.enabled:
                response["summaries"] = summarize(result, grid).to_dict()
                response["report"] = render_text_report(
                    result, grid, key_label=str(key_obj), style_label=profile.name
                )

            return json.dumps(response)
        except TemplateValidationError as e:
            return json.dumps({"status": "error", "message": str(e), "kind": e.kind.value})
        except (TemplateNotFoundError, UnknownStyleError, PlanError, ValueError) as e:
            return json.dumps({"status": "error", "message": str(e)})
        except Exception as e:
            logger.exception("Failed to plan section")
            return json.dumps({"status": "error", "message": str(e)})

    tools["music_plan_section"] = music_plan_section

    return tools
