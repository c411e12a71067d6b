# routes/scripture.py
from flask import Blueprint, jsonify, request, current_app
import logging

from utils.slides import SlideMode

scripture_bp = Blueprint('scripture', __name__)

logger = logging.getLogger(__name__)


def _service():
    return current_app.extensions['scripture_service']


@scripture_bp.route('/versions', methods=['GET'])
def get_versions():
    try:
        versions = _service().versions()
        return jsonify([v.to_json() for v in versions])
    except Exception as e:
        logger.error(f"Error in get_versions: {str(e)}", exc_info=True)
        return jsonify({"error": str(e)}), 500


@scripture_bp.route('/versions/<version_id>', methods=['DELETE'])
def delete_version(version_id):
    service = _service()
    if service.active_import is not None:
        return jsonify({"error": "An import is in progress"}), 409
    if not service.uninstall_version(version_id):
        return jsonify({"error": "Version not found"}), 404
    return jsonify({"message": "Bible version uninstalled"}), 200


@scripture_bp.route('/versions/import', methods=['POST'])
def import_version():
    service = _service()
    if service.active_import is not None:
        return jsonify({"error": "An import is already in progress"}), 409

    upload = request.files.get('file')
    if upload is not None:
        parsed = service.import_file(upload.read(), upload.filename)
    else:
        data = request.get_json(silent=True) or {}
        url = data.get('url')
        if not url or not isinstance(url, str):
            return jsonify({"error": "Provide a 'url' or upload a 'file'"}), 400
        parsed = service.download_version(url)

    if parsed is None:
        return jsonify({"error": "Import failed"}), 422

    return jsonify({
        "version": parsed.version.model_dump(mode='json'),
        "books": len(parsed.books),
        "verses": len(parsed.verses),
    }), 201


@scripture_bp.route('/books', methods=['GET'])
def get_books():
    try:
        books = _service().books(request.args.get('version'))
        return jsonify([b.to_json() for b in books])
    except Exception as e:
        logger.error(f"Error in get_books: {str(e)}", exc_info=True)
        return jsonify({"error": str(e)}), 500


@scripture_bp.route('/reference', methods=['GET'])
def get_reference():
    ref = _service().parse(request.args.get('q', ''))
    return jsonify(ref.to_json())


@scripture_bp.route('/suggest', methods=['GET'])
def get_suggestions():
    value = request.args.get('q', '')
    previous = request.args.get('previous', '')
    result = _service().autocomplete().handle_change(value, previous)
    return jsonify({
        "value": result.value,
        "suggestions": [s.to_json() for s in result.suggestions],
    })


@scripture_bp.route('/verses', methods=['GET'])
def get_verses():
    service = _service()
    ref = service.parse(request.args.get('q', ''))
    if ref.errors:
        return jsonify({"reference": ref.to_json(), "verses": []}), 400
    try:
        verses = service.lookup(ref)
    except Exception as e:
        logger.error(f"Lookup error: {str(e)}", exc_info=True)
        return jsonify({"error": str(e)}), 500
    return jsonify({"reference": ref.to_json(), "verses": [v.to_json() for v in verses]})


@scripture_bp.route('/slides', methods=['GET'])
def get_slides():
    service = _service()
    mode = request.args.get('mode')
    if mode and mode not in {m.value for m in SlideMode}:
        return jsonify({"error": f"Unknown slide mode: {mode}"}), 400

    ref = service.parse(request.args.get('q', ''))
    if ref.errors:
        return jsonify({"errors": ref.errors, "slides": []}), 400
    verses = service.lookup(ref)
    return jsonify({"slides": service.slides_for(verses, mode)})
