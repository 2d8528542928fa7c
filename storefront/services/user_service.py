"""User profile and role management."""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional, List, Dict, Any
from firebase_admin import auth
from storefront.apis.Db import Db
from storefront.config.loader import get_settings, get_valid_roles, get_users_list_limit
from storefront.documents.users.User import User
from storefront.exceptions.CustomError import ValidationError
from storefront.util.json_response import service_result
from storefront.util.logger import get_logger

logger = get_logger(__name__)


class UserService:
    """Firestore user profiles plus the Auth custom claims that mirror their role."""

    def __init__(self):
        self.db = Db.get_instance()
        self.settings = get_settings()
        self.valid_roles = get_valid_roles(self.settings)

    def _validate_role(self, role: Optional[str]):
        if role not in self.valid_roles:
            raise ValidationError(
                f"Invalid role. Must be one of: {', '.join(self.valid_roles)}", field="role")

    @service_result
    def get_user_doc(self, uid: str) -> Optional[Dict[str, Any]]:
        """Profile of ``uid``, None when the user has no profile yet."""
        if not uid:
            raise ValidationError("uid is required", field="uid")
        user = User.find(uid)
        return user.to_dict() if user else None

    @service_result
    def save_user_doc(self, data: Dict[str, Any]) -> Dict[str, str]:
        """Merge ``data`` into users/{uid}; createdAt is only written for new profiles."""
        uid = data.get("uid")
        if not uid:
            raise ValidationError("uid is required", field="uid")
        if "role" in data:
            self._validate_role(data["role"])

        ref = self.db.collections["users"].document(uid)
        now = self.db.timestamp_now()
        payload = {**data, "updatedAt": now}
        if not ref.get().exists:
            payload["createdAt"] = now

        ref.set(payload, merge=True)
        logger.info(f"Saved user profile {uid}")
        return {"uid": uid}

    @service_result
    def get_users_by_role(self, roles: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """Users whose role is in ``roles``, grouped in the order given.

        An empty list returns every user.
        """
        users_ref = self.db.collections["users"]
        if not roles:
            return [{"id": s.id, **s.to_dict()} for s in users_ref.stream()]

        users = []
        for role in roles:
            query = users_ref.where("role", "==", role).order_by("displayName")
            users.extend({"id": s.id, **s.to_dict()} for s in query.stream())
        return users

    @service_result
    def get_all_users(self) -> List[Dict[str, Any]]:
        return [{"id": s.id, **s.to_dict()} for s in self.db.collections["users"].stream()]

    @service_result
    def update_user_role(self, uid: str, role: str) -> Dict[str, str]:
        """Set the Auth custom claim, then mirror the role onto the profile.

        A failed Auth call leaves the profile untouched.
        """
        if not uid:
            raise ValidationError("uid is required", field="uid")
        self._validate_role(role)

        self.set_role_claim(uid, role)
        User.upsert(uid, {"role": role})
        logger.info(f"Updated user {uid} role to {role}")
        return {"uid": uid, "role": role}

    def set_role_claim(self, uid: str, role: str):
        """Set {"role": role} as custom claims and revoke refresh tokens so clients refresh."""
        auth.set_custom_user_claims(uid, {"role": role})
        auth.revoke_refresh_tokens(uid)
        logger.info(f"Custom claims for {uid} set to role {role}")

    @service_result
    def delete_user_doc(self, uid: str) -> Dict[str, str]:
        self.db.collections["users"].document(uid).delete()
        logger.info(f"Deleted user profile {uid}")
        return {"uid": uid}

    @service_result
    def delete_user(self, uid: str) -> Dict[str, Any]:
        """Delete the Auth account and the profile document."""
        if not uid:
            raise ValidationError("uid is required", field="uid")

        auth_deleted = True
        try:
            auth.delete_user(uid)
        except auth.UserNotFoundError:
            auth_deleted = False
            logger.warning(f"Auth user {uid} not found, deleting profile only")

        self.db.collections["users"].document(uid).delete()
        logger.info(f"Deleted user {uid}")
        return {"uid": uid, "authDeleted": auth_deleted}

    @service_result
    def get_users_detail(self) -> List[Dict[str, Any]]:
        """Auth accounts merged with their Firestore profiles."""
        page = auth.list_users(max_results=get_users_list_limit(self.settings))
        auth_users = list(page.users)

        users_ref = self.db.collections["users"]
        with ThreadPoolExecutor(max_workers=8) as pool:
            snapshots = list(pool.map(lambda u: users_ref.document(u.uid).get(), auth_users))

        details = []
        for record, snapshot in zip(auth_users, snapshots):
            profile = snapshot.to_dict() if snapshot.exists else {}
            claims = record.custom_claims or {}
            metadata = record.user_metadata
            details.append({
                **profile,
                "uid": record.uid,
                "email": record.email or profile.get("email"),
                "displayName": record.display_name or profile.get("displayName"),
                "photoURL": record.photo_url or profile.get("photoURL"),
                "disabled": record.disabled,
                "emailVerified": record.email_verified,
                "creationTime": metadata.creation_timestamp if metadata else None,
                "lastSignInTime": metadata.last_sign_in_timestamp if metadata else None,
                "customClaims": claims,
                "role": claims.get("role") or profile.get("role") or "user",
            })
        return details
