# petpass/models/user.py
from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass
class User:
    """
    인증 제공자가 돌려주는 세션 사용자 정보.
    uid가 곧 Pet 레코드의 ownerId가 됩니다.
    """
    uid: str
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"uid": self.uid, "email": self.email}
        if self.display_name is not None:
            data["displayName"] = self.display_name
        if self.photo_url is not None:
            data["photoURL"] = self.photo_url
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            uid=data['uid'],
            email=data.get('email', ''),
            display_name=data.get('displayName'),
            photo_url=data.get('photoURL')
        )
