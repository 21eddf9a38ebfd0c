from bson import ObjectId

from errors import NotFoundError


def parse_object_id(value: str, what: str = "记录") -> ObjectId:
    """格式错误的ID按不存在处理"""
    if not isinstance(value, str) or not ObjectId.is_valid(value):
        raise NotFoundError(f"{what}不存在")
    return ObjectId(value)
