"""
HTTP routes: user CRUD over the document store and S3 bucket operations.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from userbucket.config import Settings
from userbucket.db import UserStore
from userbucket.dependencies import (
    get_settings_from_app,
    get_storage_client,
    get_user_store,
)
from userbucket.errors import (
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
    store_failure,
)
from userbucket.logger import log_info
from userbucket.schemas import (
    BucketDescriptor,
    ErrorResponse,
    MessageResponse,
    ObjectDescriptor,
    UploadResponse,
    UploadResult,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from userbucket.storage import DEFAULT_CONTENT_TYPE, StorageClient

USERS_TAG = "CRUD MongoDb"
BUCKETS_TAG = "Buckets"

USER_NOT_FOUND = "Usuário não encontrado."

OPENAPI_TAGS = [
    {"name": USERS_TAG, "description": "Operações de CRUD para usuários no MongoDb."},
    {"name": BUCKETS_TAG, "description": "Operações com buckets S3."},
]

SERVER_ERROR = {500: {"model": ErrorResponse}}
NOT_FOUND = {404: {"model": ErrorResponse}}

router = APIRouter()


@router.get(
    "/mongodb/testar-conexao",
    response_model=MessageResponse,
    tags=[USERS_TAG],
    summary="Testa a conexão com o MongoDB",
    responses=SERVER_ERROR,
)
async def probe_connection(
    request: Request, db: UserStore = Depends(get_user_store)
):
    with store_failure("Erro na conexão com o MongoDB."):
        user = await db.probe()
    log_info("Teste conexão MongoDB OK", request)
    if user:
        return MessageResponse(message="Conexão com MongoDB OK - Usuário encontrado.")
    return MessageResponse(message="Conexão com MongoDB OK - Nenhum usuário encontrado.")


@router.post(
    "/usuarios",
    response_model=UserResponse,
    status_code=201,
    tags=[USERS_TAG],
    summary="Cria um usuário",
    responses=SERVER_ERROR,
)
async def create_user(
    payload: UserCreate, request: Request, db: UserStore = Depends(get_user_store)
):
    with store_failure("Erro ao criar usuário."):
        user = await db.create(payload.model_dump(exclude_unset=True))
    log_info("Usuário criado", request)
    return UserResponse.model_validate(user.as_dict())


@router.get(
    "/usuarios",
    response_model=list[UserResponse],
    tags=[USERS_TAG],
    summary="Lista todos os usuários",
    responses=SERVER_ERROR,
)
async def list_users(db: UserStore = Depends(get_user_store)):
    with store_failure("Erro ao listar usuários."):
        users = await db.find_all()
    return [UserResponse.model_validate(user.as_dict()) for user in users]


@router.get(
    "/usuarios/{user_id}",
    response_model=UserResponse,
    tags=[USERS_TAG],
    summary="Busca um usuário pelo ID",
    responses={**NOT_FOUND, **SERVER_ERROR},
)
async def get_user(user_id: str, db: UserStore = Depends(get_user_store)):
    with store_failure("Erro ao buscar usuário."):
        user = await db.find_by_id(user_id)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    return UserResponse.model_validate(user.as_dict())


@router.put(
    "/usuarios/{user_id}",
    response_model=UserResponse,
    tags=[USERS_TAG],
    summary="Atualiza um usuário",
    responses={**NOT_FOUND, **SERVER_ERROR},
)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    request: Request,
    db: UserStore = Depends(get_user_store),
):
    with store_failure("Erro ao atualizar usuário."):
        user = await db.update_by_id(user_id, payload.model_dump(exclude_unset=True))
    if user is None:
        raise NotFoundError(USER_NOT_FOUND)
    log_info("Usuário atualizado", request)
    return UserResponse.model_validate(user.as_dict())


@router.delete(
    "/usuarios/{user_id}",
    response_model=MessageResponse,
    tags=[USERS_TAG],
    summary="Remove um usuário",
    responses={**NOT_FOUND, **SERVER_ERROR},
)
async def delete_user(
    user_id: str, request: Request, db: UserStore = Depends(get_user_store)
):
    with store_failure("Erro ao remover usuário."):
        deleted = await db.delete_by_id(user_id)
    if deleted == 0:
        raise NotFoundError(USER_NOT_FOUND)
    log_info("Usuário removido", request)
    return MessageResponse(message="Usuário removido com sucesso.")


@router.get(
    "/buckets",
    response_model=list[BucketDescriptor],
    tags=[BUCKETS_TAG],
    summary="Lista os buckets",
    responses=SERVER_ERROR,
)
async def list_buckets(storage: StorageClient = Depends(get_storage_client)):
    with store_failure("Erro ao listar buckets."):
        return await storage.list_buckets()


@router.get(
    "/buckets/{bucket_name}",
    response_model=list[ObjectDescriptor],
    tags=[BUCKETS_TAG],
    summary="Lista os objetos de um bucket",
    responses=SERVER_ERROR,
)
async def list_objects(
    bucket_name: str, storage: StorageClient = Depends(get_storage_client)
):
    with store_failure("Erro ao listar objetos."):
        return await storage.list_objects(bucket_name)


UPLOAD_FORM_SCHEMA = {
    "requestBody": {
        "content": {
            "multipart/form-data": {
                "schema": {
                    "type": "object",
                    "properties": {"file": {"type": "string", "format": "binary"}},
                    "required": ["file"],
                }
            }
        }
    }
}


@router.post(
    "/buckets/{bucket_name}/upload",
    response_model=UploadResponse,
    tags=[BUCKETS_TAG],
    summary="Envia um arquivo para o bucket",
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}, **SERVER_ERROR},
    openapi_extra=UPLOAD_FORM_SCHEMA,
)
async def upload_object(
    bucket_name: str,
    request: Request,
    storage: StorageClient = Depends(get_storage_client),
    settings: Settings = Depends(get_settings_from_app),
):
    # A missing field, a text field and a file part without a name all mean no file.
    form = await request.form()
    file = form.get("file")
    if file is None or isinstance(file, str) or not file.filename:
        raise ValidationError("Nenhum arquivo enviado.")

    limit = settings.max_upload_bytes
    if limit is not None and file.size is not None and file.size > limit:
        raise PayloadTooLargeError("Arquivo excede o tamanho máximo permitido.")
    body = await file.read()
    if limit is not None and len(body) > limit:
        raise PayloadTooLargeError("Arquivo excede o tamanho máximo permitido.")

    key = file.filename
    with store_failure("Erro ao enviar arquivo."):
        result = await storage.put_object(
            bucket_name, key, body, file.content_type or DEFAULT_CONTENT_TYPE
        )
    log_info(f"Upload de {key!r} concluído", request)
    return UploadResponse(message="Upload concluído.", data=UploadResult(**result))


@router.delete(
    "/buckets/{bucket_name}/file/{file_name}",
    response_model=MessageResponse,
    tags=[BUCKETS_TAG],
    summary="Remove um arquivo do bucket",
    responses=SERVER_ERROR,
)
async def delete_object(
    bucket_name: str,
    file_name: str,
    request: Request,
    storage: StorageClient = Depends(get_storage_client),
):
    with store_failure("Erro ao remover arquivo."):
        await storage.delete_object(bucket_name, file_name)
    log_info(f"Arquivo {file_name!r} removido", request)
    return MessageResponse(message="Arquivo removido.")
