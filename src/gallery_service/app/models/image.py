from tortoise import fields
from tortoise.models import Model


class Image(Model):
    id = fields.UUIDField(primary_key=True)
    filename = fields.CharField(
        max_length=300, unique=True, description="Stored filename on disk"
    )
    original_filename = fields.CharField(
        max_length=255, description="Original filename as uploaded by user"
    )
    filepath = fields.CharField(
        max_length=500, description="Public relative path, e.g. /uploads/<filename>"
    )
    uploaded_by = fields.ForeignKeyField(
        "models.User", related_name="images", on_delete=fields.CASCADE
    )
    description = fields.CharField(max_length=500, default="")
    is_public = fields.BooleanField(default=False)
    likes_count = fields.IntField(
        default=0, description="Denormalized number of Like rows for this image"
    )

    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    likes = fields.ReverseRelation["Like"]

    class Meta:
        table = "images"

    def __str__(self) -> str:
        return f"<Image(id={self.id}, filename='{self.filename}', likes={self.likes_count})>"
