"""Builds transport-level requests from operation descriptors and call arguments."""

from __future__ import annotations

from typing import Any

from ..exceptions import RequestContractError
from .descriptor import BODY, FORM, OperationDescriptor
from .options import QueryOptions, render_value
from .request import Request, RequestDraft

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class RequestBuilder:
    """Assembles a request in a fixed order.

    Query order is: provider base params, ``command``, the descriptor's
    constant params, declared params in declaration order, then options in
    the order the options object recorded them. Params placed in the form
    are encoded into the body in declaration order; a body param is sent as is.
    """

    def __init__(
        self,
        endpoint: str,
        base_params: tuple[tuple[str, str], ...] = (),
        headers: tuple[tuple[str, str], ...] = (),
        command_param: str = "command",
    ):
        self._endpoint = endpoint.rstrip("/")
        self._base_params = base_params
        self._headers = headers
        self._command_param = command_param

    def build(
        self,
        descriptor: OperationDescriptor,
        *args: Any,
        options: QueryOptions | None = None,
        **kwargs: Any,
    ) -> Request:
        values = self._bind_arguments(descriptor, args, kwargs)
        self._check_options(descriptor, options)

        draft = RequestDraft(
            method=descriptor.method,
            endpoint=f"{self._endpoint}{descriptor.path}",
            command=descriptor.command,
        )
        for name, value in self._base_params:
            draft.add_query_param(name, value)
        if descriptor.command:
            draft.add_query_param(self._command_param, descriptor.command)
        for name, value in descriptor.constant_params:
            draft.add_query_param(name, value)

        for param in descriptor.params:
            value = values.get(param.name)
            if value is None:
                continue
            if param.placement == FORM:
                draft.add_form_param(param.query_name, render_value(value))
            elif param.placement == BODY:
                if not isinstance(value, (bytes, str)):
                    raise RequestContractError(
                        f"{descriptor.name} body argument '{param.name}' must be bytes or str, "
                        f"got {type(value).__name__}"
                    )
                draft.body = value
            else:
                draft.add_query_param(param.query_name, render_value(value))

        if options is not None:
            for name, value in options.as_query():
                draft.add_query_param(name, value)

        for name, value in self._headers:
            draft.add_header(name, value)
        if descriptor.accept:
            draft.add_header("Accept", descriptor.accept)
        if draft.form:
            draft.add_header("Content-Type", FORM_CONTENT_TYPE)
        elif draft.body is not None and descriptor.content_type:
            draft.add_header("Content-Type", descriptor.content_type)

        return draft.freeze()

    # ── Argument validation ─────────────────────────────────────────

    @staticmethod
    def _bind_arguments(
        descriptor: OperationDescriptor,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> dict[str, Any]:
        declared = descriptor.params
        if len(args) > len(declared):
            raise RequestContractError(
                f"{descriptor.name} takes {len(declared)} argument(s) but {len(args)} were given"
            )

        values: dict[str, Any] = {p.name: v for p, v in zip(declared, args)}
        known = {p.name for p in declared}
        for name, value in kwargs.items():
            if name not in known:
                raise RequestContractError(f"{descriptor.name} got an unexpected argument '{name}'")
            if name in values:
                raise RequestContractError(f"{descriptor.name} got multiple values for argument '{name}'")
            values[name] = value

        missing = [p.name for p in declared if p.required and values.get(p.name) is None]
        if missing:
            raise RequestContractError(f"{descriptor.name} is missing required argument(s): {', '.join(missing)}")
        return values

    @staticmethod
    def _check_options(descriptor: OperationDescriptor, options: QueryOptions | None) -> None:
        if options is None:
            return
        if descriptor.options_type is None:
            raise RequestContractError(f"{descriptor.name} does not accept options")
        if not isinstance(options, descriptor.options_type):
            raise RequestContractError(
                f"{descriptor.name} expects {descriptor.options_type.__name__}, got {type(options).__name__}"
            )
