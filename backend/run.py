from registry import close_store, create_app, socketio

app = create_app()

if __name__ == '__main__':
    # Use SocketIO server to enable websockets in dev
    try:
        socketio.run(app, host='0.0.0.0', port=app.config['PORT'], debug=True)
    finally:
        close_store(app)
