"""Business logic handler for document text extraction."""

from study_companion.errors import DocumentExtractionError, UnsupportedInput


def extract_document(app_ctx, request):
    uploaded_file = request.files.get('file')
    try:
        result = app_ctx.document_service.extract_uploaded_document(
            uploaded_file,
            max_bytes=app_ctx.CONFIG.max_upload_bytes,
            secure_filename_fn=app_ctx.secure_filename,
        )
    except UnsupportedInput as e:
        return app_ctx.jsonify({'error': e.message}), 415
    except DocumentExtractionError as e:
        return app_ctx.jsonify({'error': e.message}), 400
    app_ctx.log_event(
        app_ctx.logging.INFO,
        'document_extracted',
        kind=result['kind'],
        size=result['size'],
        chars=len(result['text']),
    )
    return app_ctx.jsonify(result)
