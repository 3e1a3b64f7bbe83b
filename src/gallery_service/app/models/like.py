from tortoise import fields
from tortoise.models import Model


class Like(Model):
    id = fields.UUIDField(primary_key=True)
    user = fields.ForeignKeyField(
        "models.User", related_name="likes", on_delete=fields.CASCADE
    )
    image = fields.ForeignKeyField(
        "models.Image", related_name="likes", on_delete=fields.CASCADE
    )

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "likes"
        unique_together = (("user", "image"),)

    def __str__(self) -> str:
        return f"<Like(user={self.user_id}, image={self.image_id})>"
