import os
import secrets
from flask import jsonify, request
from PIL import Image, UnidentifiedImageError

from medcare.errors import ValidationError

ALLOWED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


def success(status=200, **payload):
    """JSON envelope used by every endpoint: {"success": true, ...}."""
    return jsonify({"success": True, **payload}), status


def json_body():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("No data provided")
    return data


def validated(form_class, payload=None):
    form = form_class(payload)
    if not form.validate():
        raise ValidationError(form.first_error())
    return form


def image_dir(app):
    return app.config.get("PRODUCT_IMAGE_DIR") or os.path.join(app.instance_path, "product_images")


# Helper function to save product pictures
def save_product_image(upload, current_app_instance, product):
    _, f_ext = os.path.splitext(upload.filename or "")
    f_ext = f_ext.lower()
    if f_ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError("Image must be a jpg, jpeg, png or webp file")
    picture_fn = secrets.token_hex(8) + f_ext

    output_dir = image_dir(current_app_instance)
    if not os.path.exists(output_dir):
        os.makedirs(output_dir)

    output_size = current_app_instance.config.get("PRODUCT_IMAGE_SIZE", (500, 500))  # Resize image
    try:
        i = Image.open(upload.stream)
        i.thumbnail(output_size)
        i.save(os.path.join(output_dir, picture_fn))
    except (UnidentifiedImageError, OSError) as e:
        current_app_instance.logger.error(f"Error saving product image for product {product.id}: {e}")
        raise ValidationError("Uploaded file is not a valid image")

    old_image = os.path.basename(product.image or "")
    if old_image and product.image.startswith("/api/products/images/"):
        old_picture_path = os.path.join(output_dir, old_image)
        if os.path.exists(old_picture_path):
            try:
                os.remove(old_picture_path)
            except OSError as e:
                current_app_instance.logger.error(f"Error deleting old product image {old_image}: {e}")

    return f"/api/products/images/{picture_fn}"
