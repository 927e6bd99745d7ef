"""Callable endpoints.

Each callable is a ``POST /rpc/<name>`` view taking a JSON body
``{"data": {...}}`` and an optional ``Authorization: Bearer <token>``
header. Successful calls answer ``{"result": {...}}``; failures answer
``{"error": {"status": ..., "message": ...}}`` with a matching HTTP status.
No exception raised by business logic crosses this boundary unmapped.
"""

import functools
import json
import logging
from collections.abc import Callable
from typing import Any, Final

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from server.apps.accounts.logic.authorization import (
    AuthContext,
    issue_token,
    require_authenticated,
    sign_in,
    verify_token,
)
from server.apps.accounts.logic.claims_operations import get_account
from server.apps.accounts.logic.grant_operations import (
    grant_tier_access,
    set_admin_claims,
)
from server.apps.accounts.logic.lifecycle_operations import (
    AdminAction,
    list_accounts,
    perform_admin_action,
)
from server.apps.tiering.infrastructure.adapters import build_hot_adapter
from server.apps.tiering.logic import file_operations
from server.apps.tiering.logic.migration import build_migration_engine
from server.common.errors import CallError, InternalError, InvalidArgumentError

logger = logging.getLogger(__name__)

_BEARER_PREFIX: Final = 'Bearer '

# (request, data, context) -> result payload
Handler = Callable[[HttpRequest, dict[str, Any], AuthContext | None], dict[str, Any]]


def _error_response(error: CallError) -> JsonResponse:
    return JsonResponse(
        {'error': {'status': error.status, 'message': error.message}},
        status=error.http_status,
    )


def _resolve_context(request: HttpRequest) -> AuthContext | None:
    """Verify the bearer token of a request, if it has one."""
    header = request.headers.get('Authorization', '')
    if not header:
        return None
    if not header.startswith(_BEARER_PREFIX):
        return verify_token(None)
    return verify_token(header.removeprefix(_BEARER_PREFIX).strip())


def _parse_data(request: HttpRequest) -> dict[str, Any]:
    """Extract the ``data`` object of a call."""
    if request.content_type == 'multipart/form-data':
        return request.POST.dict()

    if not request.body:
        return {}
    try:
        body = json.loads(request.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidArgumentError('Request body must be JSON.') from None

    data = body.get('data') if isinstance(body, dict) else None
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidArgumentError('"data" must be an object.')
    return data


def callable_endpoint(handler: Handler) -> Callable[[HttpRequest], JsonResponse]:
    """Turn a handler into a callable view with error mapping.

    Args:
        handler: Function receiving the request, the call data and the
            verified caller context (None for anonymous calls).

    Returns:
        Django view function.
    """

    @csrf_exempt
    @require_POST
    @functools.wraps(handler)
    def view(request: HttpRequest) -> JsonResponse:
        try:
            context = _resolve_context(request)
            data = _parse_data(request)
            result = handler(request, data, context)
        except CallError as error:
            logger.info(
                'Call %s failed: %s %s',
                handler.__name__,
                error.status,
                error.message,
            )
            return _error_response(error)
        except Exception:
            logger.exception('Unhandled error in call %s', handler.__name__)
            return _error_response(InternalError('Internal error.'))
        return JsonResponse({'result': result})

    return view


def _require_str(data: dict[str, Any], key: str, message: str) -> str:
    value = data.get(key)
    if not value or not isinstance(value, str):
        raise InvalidArgumentError(message)
    return value


def _require_str_list(data: dict[str, Any], key: str) -> list[str]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise InvalidArgumentError(f'"{key}" must be a list of file names.')
    return value


# Session tokens

@callable_endpoint
def issue_token_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """Exchange email and password for a session token."""
    account = sign_in(data.get('email') or '', data.get('password') or '')
    return {
        'token': issue_token(account),
        'uid': account.uid,
        'claims': account.get_claims(),
    }


@callable_endpoint
def refresh_token_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """Re-issue the caller's token with its current claims."""
    context = require_authenticated(context)
    account = get_account(context.account_id)
    return {
        'token': issue_token(account),
        'claims': account.get_claims(),
    }


# Hot tier

@callable_endpoint
def list_files_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """List files in the caller's hot namespace."""
    files = file_operations.list_files(
        context,
        build_hot_adapter(),
        data.get('accountId'),
    )
    return {'files': [stored.as_dict() for stored in files]}


@callable_endpoint
def upload_file_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """Upload a multipart ``file`` into the caller's hot namespace."""
    context = require_authenticated(context)
    uploaded = request.FILES.get('file')
    if uploaded is None:
        raise InvalidArgumentError('A "file" part is required.')

    stored = file_operations.upload_file(
        context,
        build_hot_adapter(),
        data.get('fileName') or uploaded.name or '',
        uploaded,
        uploaded.content_type,
    )
    return stored.as_dict()


@callable_endpoint
def delete_files_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """Delete selected files from the caller's hot namespace."""
    context = require_authenticated(context)
    result = file_operations.delete_files(
        context,
        build_hot_adapter(),
        _require_str_list(data, 'fileNames'),
    )
    return {'deleted': result.deleted, 'failed': result.failed}


# Cold tier

@callable_endpoint
def list_gcp_files_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """List the caller's files in the cold tier."""
    files = build_migration_engine().list_cold_files(context)
    return {'files': [stored.as_dict() for stored in files]}


@callable_endpoint
def upload_to_gcp_bucket_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """Archive one hot file into the cold tier."""
    context = require_authenticated(context)
    file_name = _require_str(data, 'fileName', 'File name is required.')
    file_url = data.get('fileUrl') or None
    if file_url is not None and not isinstance(file_url, str):
        raise InvalidArgumentError('"fileUrl" must be a string.')

    message = build_migration_engine().archive(context, file_name, file_url)
    return {'message': message}


@callable_endpoint
def download_from_gcp_bucket_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """Retrieve one file, or a batch of files, from the cold tier."""
    context = require_authenticated(context)
    engine = build_migration_engine()

    if 'fileNames' in data:
        result = engine.retrieve(context, _require_str_list(data, 'fileNames'))
        return {
            'message': result.message,
            'succeeded': result.succeeded,
            'failed': [failure.as_dict() for failure in result.failed],
        }

    file_name = _require_str(data, 'fileName', 'File name is required.')
    return {'message': engine.retrieve_file(context, file_name)}


# Access grants

@callable_endpoint
def grant_gcp_access_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """Grant cold tier access to the caller."""
    grant_tier_access(context)
    return {
        'message': 'GCP access granted successfully. Please refresh your token.',
    }


@callable_endpoint
def set_custom_admin_claims_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """Set or clear the administrator claim of an account."""
    context = require_authenticated(context)
    email = _require_str(data, 'email', 'The "email" parameter is required.')
    set_admin_claims(context, email, data.get('isAdmin'))  # type: ignore[arg-type]
    return {
        'success': True,
        'message': f'Custom claims updated for user: {email}',
    }


# Account lifecycle

@callable_endpoint
def fetch_users_view(
    request: HttpRequest,
    data: dict[str, Any],
    context: AuthContext | None,
) -> dict[str, Any]:
    """List every account."""
    accounts = list_accounts(context)
    return {
        'success': True,
        'users': [summary.as_dict() for summary in accounts],
    }


def _admin_action_view(action: AdminAction) -> Callable[[HttpRequest], JsonResponse]:
    def handler(
        request: HttpRequest,
        data: dict[str, Any],
        context: AuthContext | None,
    ) -> dict[str, Any]:
        outcome = perform_admin_action(context, action, data.get('uid') or '')
        payload: dict[str, Any] = {'success': True, 'message': outcome.message}
        if outcome.password is not None:
            payload['password'] = outcome.password
        return payload

    handler.__name__ = f'{action.value}_view'
    return callable_endpoint(handler)


reset_user_password_view = _admin_action_view(AdminAction.RESET_PASSWORD)
disable_user_account_view = _admin_action_view(AdminAction.DISABLE)
enable_user_account_view = _admin_action_view(AdminAction.ENABLE)
delete_user_account_view = _admin_action_view(AdminAction.DELETE)
