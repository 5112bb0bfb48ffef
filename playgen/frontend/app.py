import json
import threading

from flask import Flask, Response, request, jsonify, stream_with_context
from flask_socketio import SocketIO

from playgen.config import config
from playgen.generation.core import generate_game
from playgen.generation.mock_profiles import LEARNER_PROFILES
from playgen.generation.models import ArticleContext, is_terminal

app = Flask(__name__)
app.config['SECRET_KEY'] = config.SECRET_KEY

# Use 'threading' async_mode to ensure compatibility with standard Flask execution
socketio = SocketIO(app, cors_allowed_origins="*", async_mode='threading')

DEFAULT_PROFILE_INDEX = 2


def stream_log(message):
    """
    Push logs to the frontend via SocketIO.
    This provides real-time feedback to the user interface.
    """
    print(message)
    socketio.emit('agent_log', {'data': message})


def build_request(data: dict) -> dict:
    """Turn the POST body into a GenerateGameInput payload."""
    index = data.get('profileIndex', DEFAULT_PROFILE_INDEX)
    if not isinstance(index, int) or not 0 <= index < len(LEARNER_PROFILES):
        raise ValueError(f"Unknown profileIndex: {index}")

    topic = data.get('topic') or data.get('articleTitle')
    article = None
    if data.get('articleTitle') and data.get('articleContent'):
        article = ArticleContext(
            title=data['articleTitle'],
            content=data['articleContent'],
            mastery_criteria=data.get('masteryCriteria') or "",
        )

    return {
        "profile": LEARNER_PROFILES[index],
        "topic": topic or None,
        "preferred_game_type": data.get('preferredGameType') or None,
        "force_custom": bool(data.get('forceCustom')),
        "article": article,
    }


def sse_frame(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


@app.route('/api/profiles', methods=['GET'])
def list_profiles():
    return jsonify([
        {"index": i, "name": p.name, "subject": p.subject, "level": p.level}
        for i, p in enumerate(LEARNER_PROFILES)
    ])


@app.route('/api/generate-game', methods=['POST'])
def generate_game_stream():
    """
    Stream pipeline events as Server-Sent Events.
    Design -> Build -> Validate -> Critic -> Revise, ending on 'complete' or 'error'.
    """
    data = request.get_json(silent=True) or {}
    try:
        game_request = build_request(data)
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    stream_log(
        f"[API] Starting game generation, topic: {game_request['topic']}, "
        f"forceCustom: {game_request['force_custom']}, profile: {game_request['profile'].name}"
    )
    abort = threading.Event()

    def events():
        pipeline = generate_game(game_request, abort=abort, log_callback=stream_log)
        try:
            for event in pipeline:
                payload = event.to_wire()
                socketio.emit('pipeline_event', payload)
                yield sse_frame(payload)
                # Stop streaming after terminal events
                if is_terminal(event):
                    break
        except Exception as e:
            stream_log(f"[API] Pipeline threw: {e}")
            yield sse_frame({"event": "error", "data": {"message": str(e) or "Pipeline failed"}})
        finally:
            # Client went away or the run ended; stop any further model calls
            abort.set()
            pipeline.close()

    headers = {
        'Cache-Control': 'no-cache, no-transform',
        'X-Accel-Buffering': 'no',
    }
    return Response(stream_with_context(events()), mimetype='text/event-stream', headers=headers)


if __name__ == '__main__':
    # Use allow_unsafe_werkzeug=True to run with the Flask development server
    socketio.run(app, debug=False, port=5000, allow_unsafe_werkzeug=True)
