#!/usr/bin/env python3
"""
Flask Web Application for the Page-Load Trace Analyzer
Provides REST API endpoints for summarizing uploaded page-load traces.
"""

from flask import Flask, request, jsonify
from werkzeug.utils import secure_filename
import logging
import os
import tempfile

from pageload_analyzer import PageLoadAnalyzer, __version__
from pageload_analyzer.core.errors import AnalysisError, InsufficientSamplesError, ManifestError
from pageload_analyzer.core.profiles import ENGINE_PROFILES
from pageload_analyzer.logging_config import setup_logger

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config['MAX_CONTENT_LENGTH'] = 500 * 1024 * 1024
app.json.sort_keys = False

ALLOWED_EXTENSIONS = {'json', 'html', 'pftrace'}


def allowed_file(filename):
    return '.' in filename and filename.rsplit('.', 1)[1].lower() in ALLOWED_EXTENSIONS


@app.route('/api/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'version': __version__})


@app.route('/api/analyze', methods=['POST'])
def analyze_api():
    """
    API endpoint to summarize the samples of one page load.
    Accepts: multipart/form-data with fields:
      - 'engine': 'chromium' | 'servo'
      - 'url': URL of the measured page
      - 'files': one or more sample files (Chromium *.json; Servo *.html,
        or manifest*.json together with the files they name)
    Returns: JSON summaries
    """
    engine = request.form.get('engine', '').strip()
    url = request.form.get('url', '').strip()
    files = request.files.getlist('files')

    if engine not in ENGINE_PROFILES:
        return jsonify({'error': f"Invalid engine. Must be one of: {sorted(ENGINE_PROFILES)}"}), 400

    if not url:
        return jsonify({'error': 'No url provided'}), 400

    if not files or not any(f.filename for f in files):
        return jsonify({'error': 'No files provided'}), 400

    for file in files:
        if not allowed_file(file.filename):
            return jsonify({'error': f"Invalid file type: {file.filename}"}), 400

    try:
        with tempfile.TemporaryDirectory() as upload_dir:
            for file in files:
                file.save(os.path.join(upload_dir, secure_filename(file.filename)))

            # Forking from a request handler is avoided, samples are decoded in-process.
            analyzer = PageLoadAnalyzer(engine=engine, url=url, num_workers=1)
            summaries = analyzer.compute_summaries(analyzer.list_sample_files(upload_dir))

        return jsonify(summaries.to_dict())

    except InsufficientSamplesError as e:
        return jsonify({'error': str(e)}), 422
    except ManifestError as e:
        return jsonify({'error': str(e)}), 400
    except (AnalysisError, OSError) as e:
        logger.exception("Analysis failed")
        return jsonify({'error': str(e)}), 500


if __name__ == '__main__':
    setup_logger()
    app.run(debug=True, host='0.0.0.0', port=5001)
