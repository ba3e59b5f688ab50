"""Router that injects normalized uploads and converts handler results to responses."""

import inspect
import mimetypes
from collections.abc import Callable, Iterable
from functools import wraps
from typing import Any

import orjson
from pydantic import BaseModel
from robyn import Request, Response, SubRouter, status_codes
from robyn.robyn import HttpMethod

from uploads.core.settings import settings as st
from uploads.files.raw import UploadPart, build_raw_files
from uploads.files.registry import UploadRegistry, upload_scope
from uploads.files.tree import Files


def parse_endpoint_signature(sig: inspect.Signature) -> set[str]:
    """Names of the parameters annotated with ``Files``."""
    return {name for name, param in sig.parameters.items() if param.annotation is Files}


def request_parts(files: dict[str, bytes] | None) -> Iterable[UploadPart]:
    """Robyn exposes files as file name -> bytes, the file name doubles as field name."""
    for filename, data in (files or {}).items():
        content_type, _ = mimetypes.guess_type(filename)
        yield UploadPart(field=filename, filename=filename, data=data, content_type=content_type or "")


def parse_request_files(file_params: set[str], request: Request, kwargs: dict[str, Any], registry: UploadRegistry) -> None:
    """Stage request files and inject the normalized tree."""
    raw = build_raw_files(request_parts(getattr(request, "files", None)), registry)
    files = Files(raw)
    for param_name in file_params:
        kwargs[param_name] = files


def parse_response(result: Any) -> Response:
    """Convert handler result to Response."""
    match result:
        case Response():
            return result
        case BaseModel():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=result.model_dump_json(indent=4),
            )
        case dict():
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={"content-type": "application/json"},
                description=orjson.dumps(result).decode(),
            )
        case _:
            return Response(
                status_code=status_codes.HTTP_200_OK,
                headers={},
                description=str(result),
            )


HTTP_METHODS = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.DELETE,
    HttpMethod.PATCH,
)


def _create_method_wrapper(original_method: Callable) -> Callable:
    @wraps(original_method)
    def method_wrapper(*args, **kwargs) -> Callable:
        decorator = original_method(*args, **kwargs)

        def handler_decorator(handler: Callable) -> Callable:
            sig = inspect.signature(handler)
            file_params = parse_endpoint_signature(sig)
            has_request_param = "request" in sig.parameters

            @wraps(handler)
            async def wrapped_handler(request: Request, **h_kwargs):
                if has_request_param:
                    h_kwargs["request"] = request

                if not file_params:
                    return parse_response(await handler(**h_kwargs))

                # Temp files live exactly as long as the handler runs
                with upload_scope(st.UPLOAD_TMP_DIR) as registry:
                    parse_request_files(file_params, request, h_kwargs, registry)
                    result = await handler(**h_kwargs)
                return parse_response(result)

            # Build signature: always include request for Robyn injection
            new_params = [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
            new_params += [p for name, p in sig.parameters.items() if name != "request" and name not in file_params]

            wrapped_handler.__signature__ = sig.replace(parameters=new_params)  # type: ignore[attr-defined]
            return decorator(wrapped_handler)

        return handler_decorator

    return method_wrapper


class Router(SubRouter):
    """SubRouter with upload injection and response handling."""

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        for method in HTTP_METHODS:
            method_name = str(method).split(".")[-1].lower()
            if hasattr(self, method_name):
                original_method = getattr(self, method_name)
                setattr(self, method_name, _create_method_wrapper(original_method))
