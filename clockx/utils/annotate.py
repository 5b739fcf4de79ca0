IMG_SIZE = (480, 480)
