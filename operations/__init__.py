"""Operations core: event-dispatch queue, document requirement resolver and status machine."""
