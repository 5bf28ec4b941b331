# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
HAL (Hypertext Application Language) response formatting utilities.
Implements HATEOAS Level-3 API responses with conditional affordance links.
"""

from typing import Dict, List, Any, Optional
from urllib.parse import urljoin

from models.responses import HalLink
from models.enums import ActionStatus

PROBLEM_BASE_URI = "https://api.sps-planning.org/problems"


class HalLinkBuilder:
    """Builder for HAL links with proper URL construction."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/') + '/'

    def build_link(
        self,
        path: str,
        method: str = "GET",
        content_type: Optional[str] = None,
        title: Optional[str] = None,
        templated: bool = False
    ) -> HalLink:
        """Build a HAL link with proper URL construction."""
        href = urljoin(self.base_url, path.lstrip('/'))

        return HalLink(
            href=href,
            method=method,
            type=content_type,
            title=title,
            templated=templated
        )

    def build_self_link(self, resource_path: str) -> HalLink:
        """Build self link for a resource."""
        return self.build_link(resource_path, title="Self")

    def build_action_link(
        self,
        resource_path: str,
        action: str,
        method: str = "POST",
        title: Optional[str] = None
    ) -> HalLink:
        """Build action link for a resource."""
        action_path = f"{resource_path}/{action}"
        return self.build_link(
            action_path,
            method=method,
            content_type="application/json",
            title=title or action.title()
        )


class AffordanceLinkBuilder:
    """Builder for conditional affordance links based on role and state."""

    def __init__(self, base_url: str):
        self.link_builder = HalLinkBuilder(base_url)

    def build_program_affordances(self, program_id: str, can_edit: bool) -> Dict[str, HalLink]:
        """
        Build affordance links for a program.

        Programs are only readable through their readiness report, so that is
        the self link; editors are also offered validation.
        """
        readiness_path = f"/api/programs/{program_id}/readiness"
        links = {
            'self': self.link_builder.build_link(readiness_path, title="Program readiness")
        }

        if can_edit:
            links['validate'] = self.link_builder.build_link(
                readiness_path,
                title="Validate program"
            )

        return links

    def build_action_affordances(
        self,
        action_id: str,
        action_status: str,
        can_edit: bool,
        has_evidence: bool
    ) -> Dict[str, HalLink]:
        """Build affordance links for an action; completion is offered only with evidence."""
        base_path = f"/api/actions/{action_id}"
        links = {
            'self': self.link_builder.build_link(f"{base_path}/completion", title="Completion check")
        }

        if can_edit:
            links['change-status'] = self.link_builder.build_action_link(
                base_path, "status", method="PUT", title="Change status"
            )
            if action_status != ActionStatus.COMPLETED and has_evidence:
                links['complete'] = self.link_builder.build_action_link(
                    base_path, "status", method="PUT", title="Mark as completed"
                )

        return links


class HalResponseBuilder:
    """Main HAL response builder."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip('/')
        self.link_builder = HalLinkBuilder(base_url)
        self.affordance_builder = AffordanceLinkBuilder(base_url)

    def build_resource_response(self, data: Dict[str, Any], links: Dict[str, HalLink]) -> Dict[str, Any]:
        """Attach HAL links to a resource representation."""
        response = dict(data)
        response['_links'] = {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}
        return response

    def build_error_response(
        self,
        error_type: str,
        title: str,
        status: int,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Build RFC 7807 compliant error response with HAL links."""
        error_response = {
            'type': f"{PROBLEM_BASE_URI}/{error_type}",
            'title': title,
            'status': status,
            'detail': detail,
            'instance': instance
        }

        if validation_errors:
            error_response['errors'] = validation_errors

        links = {
            'help': HalLink(href=error_response['type'], title="Error documentation")
        }

        if error_type == "validation-error":
            links['schema'] = self.link_builder.build_link(
                "/openapi/openapi.json",
                title="API schema"
            )
        elif error_type == "program-limit-exceeded":
            links['programs'] = self.link_builder.build_link(
                "/api/dashboard/summary",
                title="Current programs"
            )

        error_response['_links'] = {rel: link.model_dump(exclude_none=True) for rel, link in links.items()}
        return error_response


class HalFormatter:
    """High-level HAL formatter with convenience methods."""

    def __init__(self, base_url: str):
        self.builder = HalResponseBuilder(base_url)

    def format_program(self, program: Dict[str, Any], can_edit: bool) -> Dict[str, Any]:
        """Format a program with HAL links."""
        links = self.builder.affordance_builder.build_program_affordances(program['id'], can_edit)
        return self.builder.build_resource_response(program, links)

    def format_action(self, action: Dict[str, Any], can_edit: bool, has_evidence: bool) -> Dict[str, Any]:
        """Format an action with HAL links."""
        links = self.builder.affordance_builder.build_action_affordances(
            action['id'],
            action.get('status', ''),
            can_edit,
            has_evidence
        )
        return self.builder.build_resource_response(action, links)

    def format_validation_error(
        self,
        detail: str,
        instance: str,
        validation_errors: Optional[List[Dict[str, Any]]] = None
    ) -> Dict[str, Any]:
        """Format a validation error response."""
        return self.builder.build_error_response(
            "validation-error",
            "Validation Error",
            400,
            detail,
            instance,
            validation_errors
        )

    def format_completion_blocked_error(self, detail: str, instance: str) -> Dict[str, Any]:
        return self.builder.build_error_response(
            "completion-blocked",
            "Completion Blocked",
            400,
            detail,
            instance
        )

    def format_authentication_error(
        self,
        detail: str,
        instance: str,
        error_type: str = "authentication-required",
        title: str = "Authentication Required"
    ) -> Dict[str, Any]:
        """Format an authentication error response."""
        return self.builder.build_error_response(
            error_type,
            title,
            401,
            detail,
            instance
        )

    def format_authorization_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format an authorization error response."""
        return self.builder.build_error_response(
            "insufficient-permissions",
            "Insufficient Permissions",
            403,
            detail,
            instance
        )

    def format_not_found_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a not found error response."""
        return self.builder.build_error_response(
            "resource-not-found",
            "Resource Not Found",
            404,
            detail,
            instance
        )

    def format_conflict_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a conflict error response."""
        return self.builder.build_error_response(
            "resource-conflict",
            "Resource Conflict",
            409,
            detail,
            instance
        )

    def format_program_limit_error(self, detail: str, instance: str) -> Dict[str, Any]:
        return self.builder.build_error_response(
            "program-limit-exceeded",
            "Program Limit Exceeded",
            409,
            detail,
            instance
        )

    def format_service_unavailable_error(self, detail: str, instance: str) -> Dict[str, Any]:
        return self.builder.build_error_response(
            "service-unavailable",
            "Service Unavailable",
            503,
            detail,
            instance
        )

    def format_server_error(self, detail: str, instance: str) -> Dict[str, Any]:
        """Format a server error response."""
        return self.builder.build_error_response(
            "internal-server-error",
            "Internal Server Error",
            500,
            detail,
            instance
        )


# Convenience function for creating HAL formatter
def create_hal_formatter(base_url: str) -> HalFormatter:
    """Create a HAL formatter instance."""
    return HalFormatter(base_url)
