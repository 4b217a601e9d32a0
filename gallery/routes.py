import os
from flask import Blueprint, current_app, request, redirect, render_template, send_from_directory, url_for
from werkzeug.exceptions import RequestEntityTooLarge
from .errors import GalleryError, ErrorKind
from .utils.logging import logger, log_error

routes_bp = Blueprint("routes_bp", __name__)


def get_store():
    return current_app.extensions["gallery"]["store"]


def get_pipeline():
    return current_app.extensions["gallery"]["pipeline"]


def error_response(msg, code=400):
    return msg, code, {"Content-Type": "text/plain; charset=utf-8"}


def remove_stored_file(relative_path):
    if not relative_path:
        return
    path = os.path.join(current_app.config["CONTENT_DIR"], os.path.basename(relative_path))
    try:
        os.remove(path)
        logger.info(f"Removed {relative_path}")
    except FileNotFoundError:
        logger.warning(f"Stored file {relative_path} already missing")
    except OSError as e:
        logger.error(f"Could not remove {relative_path}: {e}")


@routes_bp.route("/", methods=["GET"])
def list_images():
    try:
        images = get_store().list_all()
    except GalleryError as e:
        log_error(e, "List")
        return render_template("index.html", images=[], msg="Error loading images"), e.status_code
    return render_template("index.html", images=images, msg=request.args.get("msg"))


@routes_bp.route("/upload", methods=["POST"])
def upload_image():
    pipeline = get_pipeline()
    try:
        files = request.files
    except RequestEntityTooLarge:
        outcome = pipeline.reject_oversized_request()
    else:
        outcome = pipeline.run(files)
    return redirect(url_for("routes_bp.list_images", msg=outcome.message))


@routes_bp.route("/images/<path:filename>", methods=["GET"])
def stored_image(filename):
    return send_from_directory(current_app.config["CONTENT_DIR"], filename)


@routes_bp.route("/image/<image_id>", methods=["GET"])
def get_image(image_id):
    try:
        img = get_store().get(image_id)
    except GalleryError as e:
        log_error(e, f"Load of {image_id}")
        if e.kind == ErrorKind.NOT_FOUND:
            return error_response("Image not found", e.status_code)
        return error_response(f"Error loading image: {e.detail}", e.status_code)
    return render_template("image.html", title="Single Image", image=img)


@routes_bp.route("/image/<image_id>", methods=["PUT"])
def update_image(image_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    name = str(data.get("name") or "").strip()
    if not name:
        return error_response("Name is required", 400)
    try:
        get_store().update_name(image_id, name)
    except GalleryError as e:
        log_error(e, f"Update of {image_id}")
        return error_response("Error updating image", e.status_code)
    logger.info(f"Image {image_id} renamed to {name}")
    # 303 so fetch() follows with a GET
    return redirect(url_for("routes_bp.list_images"), code=303)


@routes_bp.route("/image/<image_id>", methods=["DELETE"])
def delete_image(image_id):
    try:
        img = get_store().delete(image_id)
    except GalleryError as e:
        log_error(e, f"Delete of {image_id}")
        return error_response("Error deleting image", e.status_code)
    if img is None:
        logger.info(f"Image {image_id} not found, nothing to delete")
    else:
        remove_stored_file(img.path)
        logger.info(f"Image {image_id} deleted")
    return redirect(url_for("routes_bp.list_images"), code=303)
