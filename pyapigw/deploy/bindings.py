"""Binding methods, integrations and responses to a created resource."""

import logging

from ..exceptions import (
    GatewayAPIError,
    IntegrationCreateError,
    IntegrationResponseCreateError,
    MethodCreateError,
    MethodResponseCreateError,
)
from ..models import MethodSpec, RemoteResource, ResponseSpec
from .context import DeployContext

logger = logging.getLogger(__name__)


class ResponseBinder:
    """Creates the method response and integration response of one status."""

    def __init__(self, context: DeployContext):
        self.context = context

    def create_method_response(
        self,
        resource: RemoteResource,
        verb: str,
        status: str,
        spec: ResponseSpec,
    ) -> None:
        """Create a method response.

        Response parameters map a destination to a "required" flag; every
        destination is always declared as not required.

        Raises:
            MethodResponseCreateError: If the call fails
        """
        logger.debug(
            f"{resource.path} {verb} - Create method response for status code {status}"
        )
        parameters = {
            destination: False for destination in (spec.response_parameters or {})
        }
        try:
            self.context.client.put_method_response(
                self.context.rest_api_id,
                resource.id,
                verb,
                status,
                response_models=spec.response_models or {},
                response_parameters=parameters,
            )
        except GatewayAPIError as e:
            raise MethodResponseCreateError(resource.path, verb, status, e) from e

    def create_integration_response(
        self,
        resource: RemoteResource,
        verb: str,
        status: str,
        spec: ResponseSpec,
    ) -> None:
        """Create an integration response.

        Parameters and templates are sent as declared; anything not declared
        is left out so the control plane keeps its own defaults.

        Raises:
            IntegrationResponseCreateError: If the call fails
        """
        logger.debug(
            f"{resource.path} {verb} - Create integration response for status "
            f"code {status}"
        )
        try:
            self.context.client.put_integration_response(
                self.context.rest_api_id,
                resource.id,
                verb,
                status,
                response_parameters=spec.response_parameters,
                response_templates=spec.response_templates,
                selection_pattern=spec.selection_pattern,
            )
        except GatewayAPIError as e:
            raise IntegrationResponseCreateError(resource.path, verb, status, e) from e


class MethodBinder:
    """Creates a method request, its integration and all of its responses.

    Steps run strictly in order: method, integration, every method response,
    then every integration response. Integration responses reference method
    responses of the same status, so the two passes are not interleaved.
    """

    def __init__(self, context: DeployContext):
        self.context = context
        self.response_binder = ResponseBinder(context)

    def bind_method(
        self, resource: RemoteResource, verb: str, spec: MethodSpec
    ) -> None:
        """Bind one HTTP method to a resource.

        Raises:
            MethodCreateError: If the method request cannot be created
            IntegrationCreateError: If the integration request cannot be created
            ResponseCreateError: On the first failing status code
        """
        self._create_method_request(resource, verb, spec)
        self._create_integration_request(resource, verb, spec)

        for status, response in spec.responses.items():
            self.response_binder.create_method_response(
                resource, verb, status, response
            )

        for status, response in spec.responses.items():
            self.response_binder.create_integration_response(
                resource, verb, status, response
            )

    def _create_method_request(
        self, resource: RemoteResource, verb: str, spec: MethodSpec
    ) -> None:
        logger.debug(f"{resource.path} {verb} - Create method request")
        try:
            self.context.client.put_method(
                self.context.rest_api_id,
                resource.id,
                verb,
                authorization_type=spec.authorization_type,
                api_key_required=spec.api_key_required,
            )
        except GatewayAPIError as e:
            raise MethodCreateError(resource.path, verb, e) from e

    def _create_integration_request(
        self, resource: RemoteResource, verb: str, spec: MethodSpec
    ) -> None:
        logger.debug(f"{resource.path} {verb} - Create integration request")
        integration = spec.integration
        try:
            self.context.client.put_integration(
                self.context.rest_api_id,
                resource.id,
                verb,
                integration.type,
                integration_http_method=integration.integration_http_method,
                uri=integration.uri,
                request_templates=integration.request_templates,
                request_parameters=integration.request_parameters,
                credentials=integration.credentials,
                cache_namespace=integration.cache_namespace,
                cache_key_parameters=integration.cache_key_parameters,
            )
        except GatewayAPIError as e:
            raise IntegrationCreateError(resource.path, verb, e) from e
