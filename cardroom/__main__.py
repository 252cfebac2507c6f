import os

import uvicorn

if __name__ == '__main__':
    uvicorn.run(
        "cardroom.app:app",
        host=os.environ.get('CARDROOM_HOST', '0.0.0.0'),
        port=int(os.environ.get('CARDROOM_PORT', '5000')),
    )
