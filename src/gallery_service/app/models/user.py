from tortoise import fields
from tortoise.models import Model


class User(Model):
    id = fields.UUIDField(primary_key=True)
    username = fields.CharField(
        max_length=30, unique=True, description="Public handle, letters/digits/underscores"
    )
    email = fields.CharField(
        max_length=255, unique=True, description="Lower-cased login email"
    )
    password_hash = fields.CharField(max_length=255)

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    images = fields.ReverseRelation["Image"]
    likes = fields.ReverseRelation["Like"]

    class Meta:
        table = "users"

    def __str__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
