"""健康检查端点"""

from fastapi import APIRouter, Depends

from src.interfaces.api.container import ApiContainer
from src.interfaces.api.dependencies.container import get_container

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("/")
async def health_check(container: ApiContainer = Depends(get_container)) -> dict:
    """基本健康检查（附带规则表版本与已加载的节点类型数）"""
    return {
        "status": "healthy",
        "service": container.settings.app_name,
        "rule_table_version": container.rule_table.version,
        "node_types": len(container.registry.list_types()),
    }


@router.get("/version")
async def version_info(container: ApiContainer = Depends(get_container)) -> dict[str, str]:
    """版本信息"""
    settings = container.settings
    return {
        "app_name": settings.app_name,
        "version": settings.app_version,
        "environment": settings.env,
    }
