PASSPHRASE = "correct horse battery staple"

ALICE = "alice@example.com"
BOB = "bob@example.com"
CAROL = "carol@example.com"
DAVE = "dave@example.com"
EVE = "eve@example.com"
MALLORY = "mallory@example.com"
EXPIRING = "expiring@example.com"
UNKNOWN = "nobody@example.com"

PAYLOAD = b"hello"
MIME_PAYLOAD = b"Content-Type: text/plain\r\nSubject: hi\r\n\r\nhello world\r\n"
