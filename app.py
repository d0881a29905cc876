import traceback

from flask import Flask, jsonify, request
from flask_cors import CORS

from bible_processing import config
from bible_processing.console import log
from bible_processing.errors import BibleFormatError, EmptyImportError, InvalidAudioError
from bible_processing.normalize import VerseRecord, normalize_bible


def create_app(assistant=None, ingestor=None):
    """Build the API. Clients are created from the environment unless injected."""
    app = Flask(__name__)
    CORS(app, resources={r"/api/*": {"origins": "*"}}, methods=["POST", "OPTIONS"],
         allow_headers=["Content-Type"], send_wildcard=True)

    def get_assistant():
        nonlocal assistant
        if assistant is None:
            from bible_processing.assistant import create_assistant
            assistant = create_assistant()
        return assistant

    def get_ingestor():
        nonlocal ingestor
        if ingestor is None:
            from bible_processing.ingest import BatchIngestor
            from bible_processing.store import create_store
            ingestor = BatchIngestor(create_store())
        return ingestor

    @app.errorhandler(405)
    def method_not_allowed(_):
        return jsonify({"error": "Method not allowed"}), 405

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    # ==============================
    # Question answering
    # ==============================
    @app.route("/api/process-question", methods=["POST"])
    def process_question():
        data = request.get_json(force=True, silent=True) or {}
        audio = data.get("audio")
        question = (data.get("question") or "").strip()
        version = data.get("version") or config.DEFAULT_VERSION

        if not audio and not question:
            return jsonify({"error": "No audio provided"}), 400

        try:
            if audio:
                result = get_assistant().answer_audio(audio, version, data.get("format") or "webm")
            else:
                result = get_assistant().answer(question, version)
            return jsonify(result)
        except InvalidAudioError as e:
            return jsonify({"error": "Invalid audio", "details": str(e)}), 400
        except Exception as e:
            log(f"❌ Error processing question: {e}")
            traceback.print_exc()
            return jsonify({"error": "Failed to process question", "details": str(e)}), 500

    # ==============================
    # Bible import
    # ==============================
    @app.route("/api/upload-bible", methods=["POST"])
    def upload_bible():
        data = request.get_json(force=True, silent=True) or {}
        bible_data = data.get("bibleData")
        version = data.get("version")
        version_name = data.get("versionName") or version

        if not bible_data or not version:
            return jsonify({"error": "Missing Bible data or version"}), 400

        log(f"⚙️ Starting import for {version} ({version_name})")
        try:
            records = normalize_bible(bible_data, version)
            result = get_ingestor().ingest(records, version)
        except EmptyImportError as e:
            return jsonify({"error": str(e)}), 400
        except BibleFormatError as e:
            return jsonify({"error": "Unrecognized Bible data", "details": str(e)}), 400
        except Exception as e:
            log(f"❌ Upload error: {e}")
            return jsonify({"error": "Failed to import Bible data", "details": str(e)}), 500

        if result.already_exists:
            return jsonify({
                "success": True,
                "message": f"{version_name} already imported",
                "count": result.existing_count,
                "alreadyExists": True,
            })
        body = {
            "success": True,
            "message": f"{version_name} imported successfully",
            "count": result.inserted_count,
        }
        if result.resumed_from_batch is not None:
            body["resumedFromBatch"] = result.resumed_from_batch
        return jsonify(body)

    @app.route("/api/upload-bible-chunk", methods=["POST"])
    def upload_bible_chunk():
        data = request.get_json(force=True, silent=True) or {}
        verses = data.get("verses")
        version = data.get("version")
        version_name = data.get("versionName") or version

        if not verses or not version:
            return jsonify({"error": "Missing verses or version"}), 400
        if not isinstance(verses, list):
            return jsonify({"error": "Verses must be a list"}), 400

        try:
            records = [VerseRecord.from_row(row, version=version) for row in verses]
            result = get_ingestor().ingest_chunk(records, version, bool(data.get("isFirstBatch")))
        except BibleFormatError as e:
            return jsonify({"error": "Invalid verse row", "details": str(e)}), 400
        except Exception as e:
            log(f"❌ Upload error: {e}")
            return jsonify({"error": "Failed to upload verses", "details": str(e)}), 500

        if result.already_exists:
            return jsonify({
                "success": True,
                "message": f"{version_name} already imported",
                "count": result.existing_count,
                "alreadyExists": True,
            })
        return jsonify({"success": True, "count": result.inserted_count})

    return app


if __name__ == "__main__":
    create_app().run(host="0.0.0.0", port=config.PORT, threaded=True)
