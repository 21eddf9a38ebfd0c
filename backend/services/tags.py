from typing import Iterable, List, Optional

from bson import ObjectId

from models import TagIn

DEFAULT_TAG_COLOR = "#6b7280"

TAG_COLORS = {
    "tipo": "#3b82f6",
    "chat": "#10b981",
    "pessoa": "#f59e0b",
    "urgencia": "#ef4444",
    "previsto": "#8b5cf6",
    "demandante": "#ec4899",
}


def tag_color(tag_type: str) -> str:
    """按标签类型取显示颜色，未知类型用默认灰色"""
    return TAG_COLORS.get(tag_type.strip().lower(), DEFAULT_TAG_COLOR)


def build_tag_docs(tags: Optional[Iterable[TagIn]]) -> List[dict]:
    """生成嵌入任务文档的标签列表"""
    docs = []
    for tag in tags or []:
        docs.append({
            "id": str(ObjectId()),
            "type": tag.type,
            "value": tag.value,
            "color": tag.color or tag_color(tag.type),
        })
    return docs
