"""
Dependency injection for shared clients and resources
"""
from functools import lru_cache

from fastapi import Header, HTTPException
from openai import OpenAI
from supabase import create_client, acreate_client, Client, AsyncClient

from habit_helper.core.config import settings


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """Get Supabase client instance"""
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


async def get_async_supabase_client() -> AsyncClient:
    """Create an async Supabase client (used for the realtime change feed)"""
    return await acreate_client(settings.SUPABASE_URL, settings.SUPABASE_KEY)


@lru_cache(maxsize=1)
def get_openai_client() -> OpenAI:
    """Get OpenAI client instance"""
    return OpenAI(api_key=settings.OPENAI_API_KEY)


def get_current_user_id(x_user_id: str = Header(default="")) -> str:
    """
    Resolve the calling user.

    Authentication happens upstream; the authenticated user id is forwarded
    in the X-User-Id header.
    """
    user_id = x_user_id.strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return user_id
